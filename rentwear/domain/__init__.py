"""
Capa de Dominio - Rentas de ropa entre usuarios.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.

Estructura:
- entities/: Entidades del dominio (Listing, Rental)
- value_objects/: Objetos de valor inmutables (Money, DateRange)
- errors.py: Excepciones específicas del dominio
"""

from rentwear.domain.entities import (
    Listing,
    ListingSummary,
    Rental,
    RentalStatus,
    RentalSummary,
    RentalType,
)
from rentwear.domain.errors import (
    AccountNotFoundError,
    AuthenticationRequiredError,
    ConflictError,
    DomainError,
    DuplicateBookingError,
    GatewayError,
    IdempotencyConflictError,
    InvalidDateRangeError,
    ListingNotFoundError,
    NotFoundError,
    NotYetAvailableError,
    PaymentDeclinedError,
    RentalNotFoundError,
    StorageError,
    TransientError,
    UnauthorizedError,
    ValidationError,
)
from rentwear.domain.value_objects import DateRange, Money, price_days_inclusive

__all__ = [
    # Entities
    "Listing",
    "ListingSummary",
    "Rental",
    "RentalStatus",
    "RentalSummary",
    "RentalType",
    # Value Objects
    "DateRange",
    "Money",
    "price_days_inclusive",
    # Errors
    "DomainError",
    "ValidationError",
    "InvalidDateRangeError",
    "AuthenticationRequiredError",
    "UnauthorizedError",
    "NotFoundError",
    "AccountNotFoundError",
    "ListingNotFoundError",
    "RentalNotFoundError",
    "ConflictError",
    "NotYetAvailableError",
    "DuplicateBookingError",
    "IdempotencyConflictError",
    "GatewayError",
    "PaymentDeclinedError",
    "TransientError",
    "StorageError",
]
