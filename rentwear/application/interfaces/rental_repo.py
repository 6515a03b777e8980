from datetime import date
from typing import Sequence

from rentwear.domain.entities.rental import Rental, RentalSummary


class RentalRepo:
    """
    Ledger de rentas.

    Las rentas confirmadas son append-only. record_confirmed inserta la renta
    y ocupa sus días en una sola operación atómica: si otra renta confirmada
    ya ocupa alguno de esos días lanza ConflictError y no escribe nada.
    """

    async def record_confirmed(self, rental: Rental) -> str:
        raise NotImplementedError

    async def record_pending(self, rental: Rental) -> str:
        raise NotImplementedError

    async def find_overlapping_confirmed(
        self,
        listing_id: int,
        start_date: date,
        end_date: date,
    ) -> Sequence[Rental]:
        raise NotImplementedError

    async def get(self, rental_id: str) -> Rental | None:
        raise NotImplementedError

    async def get_by_idempotency_key(self, idem_key: str) -> Rental | None:
        raise NotImplementedError

    async def list_for_renter(self, renter_id: str) -> Sequence[RentalSummary]:
        """Historial del usuario, de la más reciente a la más antigua."""
        raise NotImplementedError
