"""Entidad Rental - registro de una renta en el ledger."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from rentwear.domain.value_objects.date_range import DateRange


class RentalStatus(str, Enum):
    """Estados posibles de una renta."""

    PENDING = "pending"
    CONFIRMED = "confirmed"


@dataclass
class Rental:
    """
    Renta de una prenda por un rango de días.

    Una renta CONFIRMED solo existe si el cargo fue exitoso y siempre
    referencia el payment_id del procesador. Una vez confirmada no se modifica.
    """

    id: str | None = None
    listing_id: int = 0
    renter_id: str = ""

    start_date: date | None = None
    end_date: date | None = None

    total_amount: Decimal = Decimal("0")
    currency_code: str = "USD"

    payment_id: str | None = None
    status: RentalStatus = RentalStatus.PENDING
    idempotency_key: str | None = None

    pickup_location: str | None = None
    dropoff_location: str | None = None

    created_at: datetime | None = None

    @property
    def period(self) -> DateRange:
        return DateRange(start=self.start_date, end=self.end_date)

    @property
    def is_confirmed(self) -> bool:
        return self.status == RentalStatus.CONFIRMED

    def confirm(self, payment_id: str) -> None:
        """Marca la renta como confirmada con el pago capturado."""
        if not payment_id:
            raise ValueError("A confirmed rental requires a payment_id")
        if self.status != RentalStatus.PENDING:
            raise ValueError(f"Cannot confirm a rental in status {self.status.value}")
        self.payment_id = payment_id
        self.status = RentalStatus.CONFIRMED


@dataclass
class ListingSummary:
    """Resumen de la prenda embebido en el historial de rentas."""

    title: str
    size: str
    item_type: str
    image_url: str | None
    price_per_day: Decimal | None


@dataclass
class RentalSummary:
    """Renta con el resumen de su prenda, para el historial del usuario."""

    rental: Rental
    listing: ListingSummary | None
