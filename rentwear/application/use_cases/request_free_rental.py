import logging

from rentwear.api.schemas.rentals import FreeRentalRequest, FreeRentalResponse
from rentwear.application.booking_rules import (
    RentalRequest,
    ensure_available,
    resolve_account_id,
    validate_locations,
    validate_period,
)
from rentwear.application.interfaces.clock import Clock
from rentwear.application.interfaces.id_generator import IdGenerator
from rentwear.application.interfaces.identity_resolver import IdentityResolver
from rentwear.application.interfaces.listing_repo import ListingRepo
from rentwear.application.interfaces.rental_repo import RentalRepo
from rentwear.application.interfaces.transaction_manager import TransactionManager
from rentwear.domain.entities.rental import Rental, RentalStatus
from rentwear.domain.errors import ListingNotFoundError, ValidationError


class RequestFreeRentalUseCase:
    """
    Variante sin pago del flujo de reserva (FreeRentalConfirmation).

    Solo registra la solicitud como PENDING. La transición a CONFIRMED
    (acuse del dueño / intercambio de códigos) no está definida todavía, así
    que una solicitud gratuita nunca libera datos de contacto ni ocupa días.
    """

    def __init__(
        self,
        listing_repo: ListingRepo,
        rental_repo: RentalRepo,
        identity_resolver: IdentityResolver,
        transaction_manager: TransactionManager,
        id_generator: IdGenerator,
        clock: Clock,
    ) -> None:
        self._listing_repo = listing_repo
        self._rental_repo = rental_repo
        self._identity_resolver = identity_resolver
        self._transaction_manager = transaction_manager
        self._id_generator = id_generator
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, request: FreeRentalRequest) -> FreeRentalResponse:
        renter_id = await resolve_account_id(self._identity_resolver, request.user_email)
        rental_request = RentalRequest(
            listing_id=request.listing_id,
            renter_id=renter_id,
            start_date=request.start_date,
            end_date=request.end_date,
            pickup_location=request.pickup_location,
            dropoff_location=request.dropoff_location,
        )

        async with self._transaction_manager.start():
            listing = await self._listing_repo.get(rental_request.listing_id)
            if not listing:
                raise ListingNotFoundError(rental_request.listing_id)
            if listing.is_paid:
                raise ValidationError("listingId", "this listing requires payment")

            period = validate_period(listing, rental_request)
            pickup, dropoff = validate_locations(rental_request)
            await ensure_available(self._rental_repo, listing.id, period)

            rental = Rental(
                id=self._id_generator.new_rental_id(),
                listing_id=listing.id,
                renter_id=renter_id,
                start_date=period.start,
                end_date=period.end,
                total_amount=listing.quote(period).amount,
                currency_code=listing.currency_code,
                status=RentalStatus.PENDING,
                pickup_location=pickup,
                dropoff_location=dropoff,
                created_at=self._clock.now(),
            )
            await self._rental_repo.record_pending(rental)

        self._logger.info(
            "Free rental requested",
            extra={"rental_id": rental.id, "listing_id": listing.id, "renter_id": renter_id},
        )
        return FreeRentalResponse(rental_id=rental.id, status=rental.status)
