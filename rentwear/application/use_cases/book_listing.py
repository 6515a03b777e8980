import hashlib
import json
import logging
from typing import Any

from rentwear.api.schemas.rentals import ProcessPaymentRequest, ProcessPaymentResponse
from rentwear.application.booking_rules import (
    RentalRequest,
    ensure_available,
    resolve_account_id,
    validate_locations,
    validate_period,
)
from rentwear.application.interfaces.clock import Clock
from rentwear.application.interfaces.id_generator import IdGenerator
from rentwear.application.interfaces.idempotency_repo import IdempotencyRecord, IdempotencyRepo
from rentwear.application.interfaces.identity_resolver import IdentityResolver
from rentwear.application.interfaces.listing_repo import ListingRepo
from rentwear.application.interfaces.payment_gateway import ChargeResult, PaymentGateway
from rentwear.application.interfaces.rental_repo import RentalRepo
from rentwear.application.interfaces.transaction_manager import TransactionManager
from rentwear.domain.entities.listing import Listing
from rentwear.domain.entities.rental import Rental, RentalStatus
from rentwear.domain.errors import (
    ConflictError,
    DuplicateBookingError,
    GatewayError,
    IdempotencyConflictError,
    ListingNotFoundError,
    StorageError,
    TransientError,
    ValidationError,
)
from rentwear.domain.value_objects.money import Money
from rentwear.infrastructure.db.retry import retry_on_deadlock

SCOPE = "RENTAL_BOOK"

reconciliation_logger = logging.getLogger("rentwear.reconciliation")


def _hash_request(payload: dict[str, Any]) -> str:
    normalized = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()


class BookListingUseCase:
    """
    Reserva un rango de días sobre una prenda y cobra la renta.

    Dos fases: primero el cargo (externo, sin transacción abierta), después
    una sola transacción que inserta la renta confirmada, ocupa sus días y
    guarda la respuesta para replays con el mismo idempotency key.
    """

    def __init__(
        self,
        listing_repo: ListingRepo,
        rental_repo: RentalRepo,
        idempotency_repo: IdempotencyRepo,
        payment_gateway: PaymentGateway,
        identity_resolver: IdentityResolver,
        transaction_manager: TransactionManager,
        id_generator: IdGenerator,
        clock: Clock,
    ) -> None:
        self._listing_repo = listing_repo
        self._rental_repo = rental_repo
        self._idempotency_repo = idempotency_repo
        self._payment_gateway = payment_gateway
        self._identity_resolver = identity_resolver
        self._transaction_manager = transaction_manager
        self._id_generator = id_generator
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        request: ProcessPaymentRequest,
        idem_key: str | None = None,
    ) -> ProcessPaymentResponse:
        idem_key = idem_key or self._id_generator.new_idempotency_key()
        req_hash = _hash_request(request.model_dump(mode="json"))

        replay = await self._replay(idem_key, req_hash)
        if replay:
            return replay

        renter_id = await resolve_account_id(self._identity_resolver, request.user_email)
        rental_request = RentalRequest(
            listing_id=request.listing_id,
            renter_id=renter_id,
            start_date=request.start_date,
            end_date=request.end_date,
            pickup_location=request.pickup_location,
            dropoff_location=request.dropoff_location,
        )

        try:
            async with self._transaction_manager.start():
                listing, rental = await self._prepare(rental_request)
        except ConflictError:
            replay = await self._replay(idem_key, req_hash)
            if replay:
                # A concurrent attempt with this key won the dates.
                return replay
            await self._refund_orphaned_charge(idem_key, request.listing_id, renter_id)
            raise

        total = Money(amount=rental.total_amount, currency_code=rental.currency_code)
        if request.amount is not None and Money(request.amount, total.currency_code) != total:
            raise ValidationError(
                "amount", f"does not match the rental total of {total.amount:.2f}"
            )
        rental.idempotency_key = idem_key

        self._logger.info(
            "Processing rental payment",
            extra={
                "idempotency_key": idem_key,
                "listing_id": listing.id,
                "renter_id": renter_id,
                "amount": str(total.amount),
            },
        )
        charge = await self._charge(listing, rental, total, request.source_id, idem_key)

        rental.confirm(charge.payment_id)
        response = ProcessPaymentResponse(
            payment_id=charge.payment_id,
            rental_id=rental.id,
            total_amount=total.amount,
            currency_code=total.currency_code,
        )
        return await self._record(rental, response, req_hash, charge)

    async def _replay(self, idem_key: str, req_hash: str) -> ProcessPaymentResponse | None:
        async with self._transaction_manager.start():
            existing = await self._idempotency_repo.get(scope=SCOPE, idem_key=idem_key)
        if not existing:
            return None
        if existing.request_hash != req_hash:
            raise IdempotencyConflictError(idem_key=idem_key, scope=SCOPE)
        self._logger.info(
            "Replaying completed booking",
            extra={"idempotency_key": idem_key, "rental_id": existing.reference_rental_id},
        )
        return ProcessPaymentResponse.model_validate(existing.response_json)

    async def _prepare(self, request: RentalRequest) -> tuple[Listing, Rental]:
        """Valida la solicitud en orden; la primera falla gana."""
        listing = await self._listing_repo.get(request.listing_id)
        if not listing:
            raise ListingNotFoundError(request.listing_id)
        if not listing.is_paid:
            raise ValidationError("listingId", "free listings are requested without payment")

        period = validate_period(listing, request)
        pickup, dropoff = validate_locations(request)
        await ensure_available(self._rental_repo, listing.id, period)

        total = listing.quote(period)
        rental = Rental(
            id=self._id_generator.new_rental_id(),
            listing_id=listing.id,
            renter_id=request.renter_id,
            start_date=period.start,
            end_date=period.end,
            total_amount=total.amount,
            currency_code=total.currency_code,
            status=RentalStatus.PENDING,
            pickup_location=pickup,
            dropoff_location=dropoff,
        )
        return listing, rental

    async def _charge(
        self,
        listing: Listing,
        rental: Rental,
        total: Money,
        source_id: str,
        idem_key: str,
    ) -> ChargeResult:
        context = {
            "idempotency_key": idem_key,
            "listing_id": listing.id,
            "renter_id": rental.renter_id,
        }
        try:
            return await self._payment_gateway.charge(
                amount=total,
                source_id=source_id,
                idempotency_key=idem_key,
                reference_id=str(listing.id),
                note=f"Rental payment for {listing.title}",
            )
        except TransientError:
            self._logger.warning("Payment outcome unknown, retry with the same key", extra=context)
            raise
        except GatewayError as exc:
            self._logger.warning(
                "Payment rejected by gateway",
                extra={**context, "reason": exc.message, "code": exc.code},
            )
            raise

    async def _record(
        self,
        rental: Rental,
        response: ProcessPaymentResponse,
        req_hash: str,
        charge: ChargeResult,
    ) -> ProcessPaymentResponse:
        idem_key = rental.idempotency_key
        context = {
            "idempotency_key": idem_key,
            "listing_id": rental.listing_id,
            "renter_id": rental.renter_id,
            "payment_id": charge.payment_id,
            "amount": str(charge.amount.amount),
        }

        async def write() -> None:
            rental.created_at = self._clock.now()
            async with self._transaction_manager.start():
                await self._rental_repo.record_confirmed(rental)
                await self._idempotency_repo.save(
                    IdempotencyRecord(
                        scope=SCOPE,
                        idem_key=idem_key,
                        request_hash=req_hash,
                        response_json=json.loads(response.model_dump_json(by_alias=True)),
                        http_status=200,
                        reference_rental_id=rental.id,
                    )
                )

        try:
            await retry_on_deadlock(write)
        except ConflictError:
            self._logger.warning("Dates taken by a concurrent booking, refunding", extra=context)
            await self._refund(charge, idem_key, context)
            raise
        except DuplicateBookingError:
            async with self._transaction_manager.start():
                recorded = await self._rental_repo.get_by_idempotency_key(idem_key)
            if not recorded or recorded.payment_id != charge.payment_id:
                reconciliation_logger.critical(
                    "Concurrent booking with same key recorded a different payment",
                    extra=context,
                )
                raise StorageError(idem_key=idem_key, payment_id=charge.payment_id)
            return ProcessPaymentResponse(
                payment_id=recorded.payment_id,
                rental_id=recorded.id,
                total_amount=recorded.total_amount,
                currency_code=recorded.currency_code,
            )
        except Exception as exc:
            reconciliation_logger.critical(
                "Rental ledger write failed after successful charge",
                exc_info=exc,
                extra=context,
            )
            raise StorageError(idem_key=idem_key, payment_id=charge.payment_id) from exc

        self._logger.info(
            "Rental confirmed",
            extra={**context, "rental_id": rental.id},
        )
        return response

    async def _refund(self, charge: ChargeResult, idem_key: str, context: dict[str, Any]) -> None:
        try:
            refund_id = await self._payment_gateway.refund(
                payment_id=charge.payment_id,
                amount=charge.amount,
                idempotency_key=f"refund-{idem_key}",
            )
        except (GatewayError, TransientError) as exc:
            reconciliation_logger.critical(
                "Refund failed for a charge without rental",
                exc_info=exc,
                extra=context,
            )
            raise StorageError(
                idem_key=idem_key,
                payment_id=charge.payment_id,
                message="Payment captured for unavailable dates and could not be refunded",
            ) from exc
        self._logger.info("Charge refunded", extra={**context, "refund_id": refund_id})

    async def _refund_orphaned_charge(self, idem_key: str, listing_id: int, renter_id: str) -> None:
        """
        Un intento previo con este key pudo cobrar y terminar en timeout.
        Si los días ya no están libres, ese cargo no tendrá renta: se reembolsa.
        """
        charge = await self._payment_gateway.find_charge(idem_key)
        if charge is None:
            return
        context = {
            "idempotency_key": idem_key,
            "listing_id": listing_id,
            "renter_id": renter_id,
            "payment_id": charge.payment_id,
            "amount": str(charge.amount.amount),
        }
        self._logger.warning(
            "Earlier attempt was captured but the dates are taken, refunding",
            extra=context,
        )
        await self._refund(charge, idem_key, context)
