"""Value Objects del dominio de rentas."""

from rentwear.domain.value_objects.date_range import DateRange, price_days_inclusive
from rentwear.domain.value_objects.money import Money

__all__ = [
    "DateRange",
    "Money",
    "price_days_inclusive",
]
