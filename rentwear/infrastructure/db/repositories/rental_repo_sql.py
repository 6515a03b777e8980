from datetime import date
from typing import Sequence

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rentwear.application.interfaces.rental_repo import RentalRepo
from rentwear.domain.entities.rental import ListingSummary, Rental, RentalStatus, RentalSummary
from rentwear.domain.errors import ConflictError, DuplicateBookingError
from rentwear.infrastructure.db.tables import listings, rental_days, rentals


class RentalRepoSQL(RentalRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record_confirmed(self, rental: Rental) -> str:
        if rental.status != RentalStatus.CONFIRMED or not rental.payment_id:
            raise ValueError("record_confirmed requires a confirmed rental with payment_id")
        try:
            await self._insert(rental)
            await self._session.execute(
                insert(rental_days),
                [
                    {"listing_id": rental.listing_id, "day": day, "rental_id": rental.id}
                    for day in rental.period.each_day()
                ],
            )
        except IntegrityError as exc:
            detail = str(exc.orig)
            if "idempotency_key" in detail:
                raise DuplicateBookingError(rental.idempotency_key) from exc
            if "rental_days" in detail:
                raise ConflictError(rental.listing_id) from exc
            raise
        return rental.id

    async def record_pending(self, rental: Rental) -> str:
        if rental.status != RentalStatus.PENDING:
            raise ValueError("record_pending requires a pending rental")
        await self._insert(rental)
        return rental.id

    async def _insert(self, rental: Rental) -> None:
        stmt = insert(rentals).values(
            id=rental.id,
            listing_id=rental.listing_id,
            renter_id=rental.renter_id,
            start_date=rental.start_date,
            end_date=rental.end_date,
            total_amount=rental.total_amount,
            currency_code=rental.currency_code,
            payment_id=rental.payment_id,
            status=rental.status.value,
            idempotency_key=rental.idempotency_key,
            pickup_location=rental.pickup_location,
            dropoff_location=rental.dropoff_location,
            created_at=rental.created_at,
        )
        await self._session.execute(stmt)

    async def find_overlapping_confirmed(
        self,
        listing_id: int,
        start_date: date,
        end_date: date,
    ) -> Sequence[Rental]:
        stmt = (
            select(rentals)
            .where(
                rentals.c.listing_id == listing_id,
                rentals.c.status == RentalStatus.CONFIRMED.value,
                rentals.c.start_date <= end_date,
                rentals.c.end_date >= start_date,
            )
            .order_by(rentals.c.start_date)
        )
        result = await self._session.execute(stmt)
        return [self._map_rental(row) for row in result.mappings().all()]

    async def get(self, rental_id: str) -> Rental | None:
        stmt = select(rentals).where(rentals.c.id == rental_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return self._map_rental(row) if row else None

    async def get_by_idempotency_key(self, idem_key: str) -> Rental | None:
        stmt = select(rentals).where(rentals.c.idempotency_key == idem_key).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return self._map_rental(row) if row else None

    async def list_for_renter(self, renter_id: str) -> Sequence[RentalSummary]:
        stmt = (
            select(
                rentals,
                listings.c.title.label("listing_title"),
                listings.c.size.label("listing_size"),
                listings.c.item_type.label("listing_item_type"),
                listings.c.image_url.label("listing_image_url"),
                listings.c.price_per_day.label("listing_price_per_day"),
            )
            .select_from(rentals.outerjoin(listings, rentals.c.listing_id == listings.c.id))
            .where(rentals.c.renter_id == renter_id)
            .order_by(rentals.c.created_at.desc(), rentals.c.id.desc())
        )
        result = await self._session.execute(stmt)
        summaries = []
        for row in result.mappings().all():
            listing = None
            if row["listing_title"] is not None:
                listing = ListingSummary(
                    title=row["listing_title"],
                    size=row["listing_size"],
                    item_type=row["listing_item_type"],
                    image_url=row["listing_image_url"],
                    price_per_day=row["listing_price_per_day"],
                )
            summaries.append(RentalSummary(rental=self._map_rental(row), listing=listing))
        return summaries

    def _map_rental(self, row) -> Rental:
        return Rental(
            id=row["id"],
            listing_id=row["listing_id"],
            renter_id=row["renter_id"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            total_amount=row["total_amount"],
            currency_code=row["currency_code"],
            payment_id=row.get("payment_id"),
            status=RentalStatus(row["status"]),
            idempotency_key=row.get("idempotency_key"),
            pickup_location=row.get("pickup_location"),
            dropoff_location=row.get("dropoff_location"),
            created_at=row.get("created_at"),
        )
