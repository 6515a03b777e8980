from collections import defaultdict
from dataclasses import replace
from datetime import date
from typing import Sequence

from rentwear.application.interfaces.listing_repo import ListingRepo
from rentwear.application.interfaces.rental_repo import RentalRepo
from rentwear.domain.entities.rental import ListingSummary, Rental, RentalStatus, RentalSummary
from rentwear.domain.errors import ConflictError, DuplicateBookingError


class InMemoryRentalRepo(RentalRepo):
    """
    Ledger en memoria.

    record_confirmed no hace await entre la verificación de días ocupados y
    la inserción, así que es atómico dentro del event loop.
    """

    def __init__(self, listing_repo: ListingRepo | None = None) -> None:
        self._listing_repo = listing_repo
        self._by_id: dict[str, Rental] = {}
        self._by_idem_key: dict[str, str] = {}
        self._occupied: dict[int, dict[date, str]] = defaultdict(dict)
        self._sequence: dict[str, int] = {}

    async def record_confirmed(self, rental: Rental) -> str:
        if rental.status != RentalStatus.CONFIRMED or not rental.payment_id:
            raise ValueError("record_confirmed requires a confirmed rental with payment_id")
        if rental.idempotency_key and rental.idempotency_key in self._by_idem_key:
            raise DuplicateBookingError(rental.idempotency_key)
        days = rental.period.each_day()
        occupied = self._occupied[rental.listing_id]
        if any(day in occupied for day in days):
            raise ConflictError(rental.listing_id)
        for day in days:
            occupied[day] = rental.id
        self._store(rental)
        return rental.id

    async def record_pending(self, rental: Rental) -> str:
        if rental.status != RentalStatus.PENDING:
            raise ValueError("record_pending requires a pending rental")
        self._store(rental)
        return rental.id

    def _store(self, rental: Rental) -> None:
        stored = replace(rental)
        self._by_id[stored.id] = stored
        self._sequence[stored.id] = len(self._sequence)
        if stored.idempotency_key:
            self._by_idem_key[stored.idempotency_key] = stored.id

    async def find_overlapping_confirmed(
        self,
        listing_id: int,
        start_date: date,
        end_date: date,
    ) -> Sequence[Rental]:
        return [
            replace(rental)
            for rental in self._by_id.values()
            if rental.listing_id == listing_id
            and rental.status == RentalStatus.CONFIRMED
            and rental.start_date <= end_date
            and rental.end_date >= start_date
        ]

    async def get(self, rental_id: str) -> Rental | None:
        rental = self._by_id.get(rental_id)
        return replace(rental) if rental else None

    async def get_by_idempotency_key(self, idem_key: str) -> Rental | None:
        rental_id = self._by_idem_key.get(idem_key)
        return await self.get(rental_id) if rental_id else None

    async def list_for_renter(self, renter_id: str) -> Sequence[RentalSummary]:
        owned = [rental for rental in self._by_id.values() if rental.renter_id == renter_id]
        owned.sort(
            key=lambda rental: (rental.created_at is not None, rental.created_at, self._sequence[rental.id]),
            reverse=True,
        )
        summaries = []
        for rental in owned:
            listing = None
            if self._listing_repo:
                found = await self._listing_repo.get(rental.listing_id)
                if found:
                    listing = ListingSummary(
                        title=found.title,
                        size=found.size,
                        item_type=found.item_type,
                        image_url=found.image_url,
                        price_per_day=found.price_per_day,
                    )
            summaries.append(RentalSummary(rental=replace(rental), listing=listing))
        return summaries
