"""Reglas compartidas por el flujo pagado y el flujo de rentas gratuitas."""

from dataclasses import dataclass
from datetime import date

from rentwear.application.interfaces.identity_resolver import IdentityResolver
from rentwear.application.interfaces.rental_repo import RentalRepo
from rentwear.domain.entities.listing import Listing
from rentwear.domain.errors import (
    AccountNotFoundError,
    AuthenticationRequiredError,
    ConflictError,
    InvalidDateRangeError,
    ValidationError,
)
from rentwear.domain.value_objects.date_range import DateRange


@dataclass(frozen=True)
class RentalRequest:
    """Solicitud de renta ya asociada a una cuenta (no se persiste)."""

    listing_id: int
    renter_id: str
    start_date: date | None
    end_date: date | None
    pickup_location: str | None
    dropoff_location: str | None


async def resolve_account_id(resolver: IdentityResolver, email: str | None) -> str:
    """Email -> id de cuenta, con búsqueda directa en el proveedor de identidad."""
    if not email or not email.strip():
        raise AuthenticationRequiredError()
    normalized = email.strip().lower()
    account_id = await resolver.find_account_id_by_email(normalized)
    if not account_id:
        raise AccountNotFoundError(normalized)
    return account_id


def validate_period(listing: Listing, request: RentalRequest) -> DateRange:
    """Fechas presentes, ordenadas y dentro de la ventana de disponibilidad."""
    if request.start_date is None:
        raise ValidationError("startDate", "is required")
    if request.end_date is None:
        raise ValidationError("endDate", "is required")
    if request.start_date > request.end_date:
        raise InvalidDateRangeError("startDate must be on or before endDate")

    period = DateRange(start=request.start_date, end=request.end_date)
    if not listing.availability.contains(period):
        raise InvalidDateRangeError(
            f"Selected dates must be within the listing availability "
            f"({listing.available_from.isoformat()} to {listing.available_to.isoformat()})"
        )
    return period


def validate_locations(request: RentalRequest) -> tuple[str, str]:
    pickup = (request.pickup_location or "").strip()
    dropoff = (request.dropoff_location or "").strip()
    if not pickup:
        raise ValidationError("pickupLocation", "is required")
    if not dropoff:
        raise ValidationError("dropoffLocation", "is required")
    return pickup, dropoff


async def ensure_available(rental_repo: RentalRepo, listing_id: int, period: DateRange) -> None:
    """Falla con ConflictError si una renta confirmada ya ocupa algún día del periodo."""
    overlapping = await rental_repo.find_overlapping_confirmed(
        listing_id=listing_id,
        start_date=period.start,
        end_date=period.end,
    )
    if overlapping:
        raise ConflictError(listing_id)
