from dataclasses import dataclass

from rentwear.domain.value_objects.money import Money


@dataclass
class ChargeResult:
    payment_id: str
    status: str
    amount: Money


class PaymentGateway:
    """
    Cliente del procesador de pagos.

    charge debe lanzar PaymentDeclinedError si el cargo es rechazado,
    TransientError si el resultado es desconocido (timeout, red) y
    GatewayError para cualquier otra falla del procesador.
    """

    async def charge(
        self,
        amount: Money,
        source_id: str,
        idempotency_key: str,
        reference_id: str,
        note: str | None = None,
    ) -> ChargeResult:
        raise NotImplementedError

    async def refund(self, payment_id: str, amount: Money, idempotency_key: str) -> str:
        """Reembolsa un cargo capturado. Regresa el id del reembolso."""
        raise NotImplementedError

    async def find_charge(self, idempotency_key: str) -> ChargeResult | None:
        """Cargo capturado con ese idempotency key, o None si no existe."""
        raise NotImplementedError
