from rentwear.api.schemas.rentals import ContactInfoResponse
from rentwear.application.booking_rules import resolve_account_id
from rentwear.application.interfaces.identity_resolver import IdentityResolver
from rentwear.application.interfaces.listing_repo import ListingRepo
from rentwear.application.interfaces.rental_repo import RentalRepo
from rentwear.domain.errors import (
    ListingNotFoundError,
    NotYetAvailableError,
    RentalNotFoundError,
    UnauthorizedError,
)


class GetRentalContactUseCase:
    """Datos de contacto del dueño, solo para el renter de una renta confirmada."""

    def __init__(
        self,
        rental_repo: RentalRepo,
        listing_repo: ListingRepo,
        identity_resolver: IdentityResolver,
    ) -> None:
        self._rental_repo = rental_repo
        self._listing_repo = listing_repo
        self._identity_resolver = identity_resolver

    async def execute(self, rental_id: str, requester_email: str | None) -> ContactInfoResponse:
        requester_id = await resolve_account_id(self._identity_resolver, requester_email)

        rental = await self._rental_repo.get(rental_id)
        if not rental:
            raise RentalNotFoundError(rental_id)
        if rental.renter_id != requester_id:
            raise UnauthorizedError("Only the renter can view the seller contact information")
        if not rental.is_confirmed:
            raise NotYetAvailableError(rental_id, rental.status.value)

        listing = await self._listing_repo.get(rental.listing_id)
        if not listing:
            raise ListingNotFoundError(rental.listing_id)

        return ContactInfoResponse(phone_number=listing.phone, contact_email=listing.contact_email)
