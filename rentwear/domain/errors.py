"""Excepciones de dominio para el sistema de rentas de ropa."""


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de Validación ===


class ValidationError(DomainError):
    """Error de validación de datos de entrada."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Invalid '{field}': {message}",
            code="VALIDATION_ERROR",
        )
        self.field = field


class InvalidDateRangeError(DomainError):
    """Rango de fechas inválido."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_DATE_RANGE")


# === Errores de Identidad ===


class AuthenticationRequiredError(DomainError):
    """La petición no trae identificación del usuario."""

    def __init__(self) -> None:
        super().__init__(message="User authentication required", code="AUTHENTICATION_REQUIRED")


class UnauthorizedError(DomainError):
    """El usuario no es dueño del recurso solicitado."""

    def __init__(self, message: str = "Not allowed to access this resource"):
        super().__init__(message=message, code="UNAUTHORIZED")


# === Errores de Recurso no encontrado ===


class NotFoundError(DomainError):
    """Base para recursos inexistentes."""


class AccountNotFoundError(NotFoundError):
    """No existe una cuenta para el email indicado."""

    def __init__(self, email: str):
        super().__init__(message="User not found", code="ACCOUNT_NOT_FOUND")
        self.email = email


class ListingNotFoundError(NotFoundError):
    """La publicación no existe."""

    def __init__(self, listing_id: int):
        super().__init__(message=f"Listing not found: {listing_id}", code="LISTING_NOT_FOUND")
        self.listing_id = listing_id


class RentalNotFoundError(NotFoundError):
    """La renta no existe."""

    def __init__(self, rental_id: str):
        super().__init__(message=f"Rental not found: {rental_id}", code="RENTAL_NOT_FOUND")
        self.rental_id = rental_id


# === Errores de Renta ===


class ConflictError(DomainError):
    """Otra renta confirmada ya ocupa parte del rango solicitado."""

    def __init__(self, listing_id: int, message: str | None = None):
        super().__init__(
            message=message or "Listing is already rented for some of the selected dates",
            code="RENTAL_CONFLICT",
        )
        self.listing_id = listing_id


class NotYetAvailableError(DomainError):
    """La información de contacto se libera solo con la renta confirmada."""

    def __init__(self, rental_id: str, current_status: str):
        super().__init__(
            message="Contact information available after successful rental",
            code="CONTACT_NOT_YET_AVAILABLE",
        )
        self.rental_id = rental_id
        self.current_status = current_status


class DuplicateBookingError(DomainError):
    """Ya existe una renta registrada con el mismo idempotency key."""

    def __init__(self, idem_key: str):
        super().__init__(
            message=f"A rental was already recorded for key '{idem_key}'",
            code="DUPLICATE_BOOKING",
        )
        self.idem_key = idem_key


# === Errores de Idempotencia ===


class IdempotencyConflictError(DomainError):
    """Conflicto de idempotencia: mismo key pero diferente request."""

    def __init__(self, idem_key: str, scope: str):
        super().__init__(
            message="Idempotency conflict: different payload for same key",
            code="IDEMPOTENCY_CONFLICT",
        )
        self.idem_key = idem_key
        self.scope = scope


# === Errores de Pago ===


class GatewayError(DomainError):
    """El procesador de pagos falló o rechazó el cargo."""

    def __init__(
        self,
        message: str = "Payment processing failed",
        code: str = "GATEWAY_ERROR",
        idem_key: str | None = None,
    ):
        super().__init__(message=message, code=code)
        self.idem_key = idem_key


class PaymentDeclinedError(GatewayError):
    """El cargo fue rechazado (tarjeta, fondos, token inválido)."""

    def __init__(self, reason: str, idem_key: str | None = None):
        super().__init__(message=reason, code="PAYMENT_DECLINED", idem_key=idem_key)
        self.reason = reason


class TransientError(DomainError):
    """
    Resultado desconocido del cargo (timeout, red, circuito abierto).

    Reintentar con el mismo idempotency key es seguro.
    """

    def __init__(self, idem_key: str, message: str = "Payment service temporarily unavailable"):
        super().__init__(message=message, code="PAYMENT_RETRYABLE")
        self.idem_key = idem_key


# === Errores de Almacenamiento ===


class StorageError(DomainError):
    """
    Falló la escritura del ledger después de un cargo exitoso.

    El dinero ya se movió; requiere conciliación manual.
    """

    def __init__(
        self,
        idem_key: str,
        payment_id: str | None,
        message: str = "Payment captured but the rental could not be recorded",
    ):
        super().__init__(message=message, code="STORAGE_ERROR")
        self.idem_key = idem_key
        self.payment_id = payment_id
