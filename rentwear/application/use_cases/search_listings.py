import logging

from rentwear.api.schemas.listings import PublicListing, SearchListingsResponse
from rentwear.application.interfaces.listing_repo import ListingRepo

logger = logging.getLogger(__name__)


class SearchListingsUseCase:
    def __init__(self, listing_repo: ListingRepo) -> None:
        self._listing_repo = listing_repo

    async def execute(self, query: str | None) -> SearchListingsResponse:
        term = (query or "").strip()
        logger.info("Searching listings", extra={"query": term})
        listings = await self._listing_repo.search(term)
        return SearchListingsResponse(listings=[PublicListing.from_entity(listing) for listing in listings])
