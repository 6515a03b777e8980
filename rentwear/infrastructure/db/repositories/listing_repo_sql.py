from typing import Sequence

from sqlalchemy import func, insert, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentwear.application.interfaces.listing_repo import ListingRepo
from rentwear.domain.entities.listing import Listing, RentalType
from rentwear.infrastructure.db.tables import listings

SEARCHABLE_COLUMNS = (
    listings.c.title,
    listings.c.size,
    listings.c.item_type,
    listings.c.condition,
)


class ListingRepoSQL(ListingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, listing: Listing) -> Listing:
        stmt = insert(listings).values(
            owner_id=listing.owner_id,
            title=listing.title,
            item_type=listing.item_type,
            size=listing.size,
            condition=listing.condition,
            wash_instructions=listing.wash_instructions,
            rental_type=listing.rental_type.value,
            price_per_day=listing.price_per_day,
            currency_code=listing.currency_code,
            available_from=listing.available_from,
            available_to=listing.available_to,
            image_url=listing.image_url,
            phone_number=listing.phone,
            contact_email=listing.contact_email,
            created_at=listing.created_at,
        )
        result = await self._session.execute(stmt)
        listing.id = result.inserted_primary_key[0]
        return listing

    async def get(self, listing_id: int) -> Listing | None:
        stmt = select(listings).where(listings.c.id == listing_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return self._map_listing(row) if row else None

    async def search(self, query: str) -> Sequence[Listing]:
        stmt = select(listings).order_by(listings.c.id)
        term = query.strip().lower()
        if term:
            stmt = stmt.where(
                or_(
                    *(
                        func.lower(column).contains(term, autoescape=True)
                        for column in SEARCHABLE_COLUMNS
                    )
                )
            )
        result = await self._session.execute(stmt)
        return [self._map_listing(row) for row in result.mappings().all()]

    def _map_listing(self, row) -> Listing:
        return Listing(
            id=row["id"],
            owner_id=row["owner_id"],
            title=row["title"],
            item_type=row["item_type"],
            size=row["size"],
            condition=row["condition"],
            wash_instructions=row.get("wash_instructions"),
            rental_type=RentalType(row["rental_type"]),
            price_per_day=row.get("price_per_day"),
            currency_code=row["currency_code"],
            available_from=row["available_from"],
            available_to=row["available_to"],
            image_url=row.get("image_url"),
            phone=row.get("phone_number"),
            contact_email=row.get("contact_email"),
            created_at=row.get("created_at"),
        )
