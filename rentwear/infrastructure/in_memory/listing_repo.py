from typing import Sequence

from rentwear.application.interfaces.listing_repo import ListingRepo
from rentwear.domain.entities.listing import Listing


class InMemoryListingRepo(ListingRepo):
    def __init__(self) -> None:
        self._by_id: dict[int, Listing] = {}
        self._next_id = 1

    async def create(self, listing: Listing) -> Listing:
        listing.id = self._next_id
        self._next_id += 1
        self._by_id[listing.id] = listing
        return listing

    async def get(self, listing_id: int) -> Listing | None:
        return self._by_id.get(listing_id)

    async def search(self, query: str) -> Sequence[Listing]:
        term = query.strip().lower()
        results = []
        for listing in sorted(self._by_id.values(), key=lambda item: item.id):
            fields = (listing.title, listing.size, listing.item_type, listing.condition)
            if not term or any(term in (value or "").lower() for value in fields):
                results.append(listing)
        return results
