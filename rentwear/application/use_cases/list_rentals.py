from rentwear.api.schemas.rentals import RentalEntry, RentalsResponse
from rentwear.application.booking_rules import resolve_account_id
from rentwear.application.interfaces.identity_resolver import IdentityResolver
from rentwear.application.interfaces.rental_repo import RentalRepo


class ListRentalsUseCase:
    def __init__(self, rental_repo: RentalRepo, identity_resolver: IdentityResolver) -> None:
        self._rental_repo = rental_repo
        self._identity_resolver = identity_resolver

    async def execute(self, renter_email: str | None) -> RentalsResponse:
        renter_id = await resolve_account_id(self._identity_resolver, renter_email)
        summaries = await self._rental_repo.list_for_renter(renter_id)
        return RentalsResponse(rentals=[RentalEntry.from_summary(s) for s in summaries])
