"""Value Object DateRange - rango de días de una renta (ambos extremos incluidos)."""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta

SECONDS_PER_DAY = 24 * 60 * 60


def price_days_inclusive(start: date | datetime, end: date | datetime) -> int:
    """
    Días cobrables entre start y end, contando ambos extremos.

    Regla de negocio: ceil((end - start) / 1 día) + 1.
    Ejemplo: 2024-06-01 -> 2024-06-03 = 3 días; mismo día = 1 día.
    """
    delta: timedelta = end - start
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY) + 1


@dataclass(frozen=True)
class DateRange:
    """
    Value Object inmutable que representa un rango de fechas cerrado [start, end].

    Attributes:
        start: Primer día de la renta.
        end: Último día de la renta (incluido).
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"start must not be after end: {self.start} > {self.end}")

    @property
    def days(self) -> int:
        """Número de días cobrables del rango."""
        return price_days_inclusive(self.start, self.end)

    def overlaps_with(self, other: "DateRange") -> bool:
        """Dos rangos cerrados se traslapan si comparten al menos un día."""
        return self.start <= other.end and other.start <= self.end

    def contains(self, other: "DateRange") -> bool:
        return self.start <= other.start and other.end <= self.end

    def each_day(self) -> list[date]:
        """Lista de todos los días del rango, en orden."""
        return [self.start + timedelta(days=offset) for offset in range((self.end - self.start).days + 1)]

    def __str__(self) -> str:
        return f"{self.start.isoformat()} -> {self.end.isoformat()}"
