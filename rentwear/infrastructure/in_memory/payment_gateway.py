from rentwear.application.interfaces.payment_gateway import ChargeResult, PaymentGateway
from rentwear.domain.errors import DomainError, PaymentDeclinedError
from rentwear.domain.value_objects.money import Money

# Stripe test payment methods that always decline.
DECLINED_SOURCES = {"pm_card_chargeDeclined", "pm_card_visa_chargeDeclined"}


class StubPaymentGateway(PaymentGateway):
    """
    Gateway en memoria con la semántica de idempotencia de Stripe: repetir
    un cargo con el mismo key regresa el resultado original sin cobrar de nuevo.
    """

    def __init__(self, payment_id_prefix: str = "p") -> None:
        self._prefix = payment_id_prefix
        self._results: dict[str, ChargeResult | DomainError] = {}
        self._failures: list[tuple[DomainError, bool]] = []
        self._refund_failures: list[DomainError] = []
        self.refunds: dict[str, str] = {}
        self.captured: list[ChargeResult] = []

    def fail_next(self, error: DomainError, after_capture: bool = False) -> None:
        """
        Hace que el siguiente cargo nuevo lance el error indicado.

        Con after_capture=True el cargo sí se captura antes de fallar,
        como un timeout que llega después de que el procesador cobró.
        """
        self._failures.append((error, after_capture))

    def fail_next_refund(self, error: DomainError) -> None:
        self._refund_failures.append(error)

    async def charge(
        self,
        amount: Money,
        source_id: str,
        idempotency_key: str,
        reference_id: str,
        note: str | None = None,
    ) -> ChargeResult:
        if idempotency_key in self._results:
            previous = self._results[idempotency_key]
            if isinstance(previous, DomainError):
                raise previous
            return previous

        if self._failures:
            error, after_capture = self._failures.pop(0)
            if after_capture:
                self._capture(amount, idempotency_key)
            elif isinstance(error, PaymentDeclinedError):
                self._results[idempotency_key] = error
            raise error

        if source_id in DECLINED_SOURCES:
            error = PaymentDeclinedError("Your card was declined.", idem_key=idempotency_key)
            self._results[idempotency_key] = error
            raise error

        return self._capture(amount, idempotency_key)

    async def refund(self, payment_id: str, amount: Money, idempotency_key: str) -> str:
        if self._refund_failures:
            raise self._refund_failures.pop(0)
        if payment_id not in self.refunds:
            self.refunds[payment_id] = f"re_{len(self.refunds) + 1}"
        return self.refunds[payment_id]

    async def find_charge(self, idempotency_key: str) -> ChargeResult | None:
        result = self._results.get(idempotency_key)
        if isinstance(result, ChargeResult):
            return result
        return None

    def _capture(self, amount: Money, idempotency_key: str) -> ChargeResult:
        result = ChargeResult(
            payment_id=f"{self._prefix}{len(self.captured) + 1}",
            status="succeeded",
            amount=amount,
        )
        self._results[idempotency_key] = result
        self.captured.append(result)
        return result
