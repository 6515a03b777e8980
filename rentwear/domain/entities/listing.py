"""Entidad Listing - prenda publicada para renta."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from rentwear.domain.value_objects.date_range import DateRange
from rentwear.domain.value_objects.money import Money


class RentalType(str, Enum):
    """Modalidad de la publicación."""

    RENT = "rent"
    FREE = "free"


@dataclass
class Listing:
    """
    Prenda publicada por su dueño.

    Invariantes:
    - available_from <= available_to
    - price_per_day es obligatorio si y solo si rental_type == RENT
    """

    id: int | None = None
    owner_id: str = ""

    title: str = ""
    item_type: str = ""
    size: str = ""
    condition: str = ""
    wash_instructions: str | None = None

    rental_type: RentalType = RentalType.RENT
    price_per_day: Decimal | None = None
    currency_code: str = "USD"

    available_from: date | None = None
    available_to: date | None = None

    image_url: str | None = None
    phone: str | None = None
    contact_email: str | None = None

    created_at: datetime | None = None

    @property
    def availability(self) -> DateRange:
        """Ventana de disponibilidad como Value Object."""
        return DateRange(start=self.available_from, end=self.available_to)

    @property
    def is_paid(self) -> bool:
        return self.rental_type == RentalType.RENT

    @property
    def daily_rate(self) -> Money:
        """Tarifa diaria; cero para prendas gratuitas."""
        if self.price_per_day is None:
            return Money.zero(self.currency_code)
        return Money(amount=self.price_per_day, currency_code=self.currency_code)

    def quote(self, period: DateRange) -> Money:
        """Total a cobrar por el periodo: días incluidos * tarifa diaria."""
        return self.daily_rate * period.days
