"""Interfaces (Puertos) de la capa de aplicación."""

from rentwear.application.interfaces.clock import Clock, FakeClock, SystemClock
from rentwear.application.interfaces.id_generator import (
    FakeIdGenerator,
    IdGenerator,
    RealIdGenerator,
)
from rentwear.application.interfaces.idempotency_repo import IdempotencyRecord, IdempotencyRepo
from rentwear.application.interfaces.identity_resolver import IdentityResolver
from rentwear.application.interfaces.listing_repo import ListingRepo
from rentwear.application.interfaces.object_store import ObjectStore
from rentwear.application.interfaces.payment_gateway import ChargeResult, PaymentGateway
from rentwear.application.interfaces.rental_repo import RentalRepo
from rentwear.application.interfaces.transaction_manager import TransactionManager

__all__ = [
    # Repositories
    "IdempotencyRepo",
    "IdempotencyRecord",
    "ListingRepo",
    "RentalRepo",
    # Gateways
    "PaymentGateway",
    "ChargeResult",
    "IdentityResolver",
    "ObjectStore",
    # Infrastructure
    "TransactionManager",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "IdGenerator",
    "RealIdGenerator",
    "FakeIdGenerator",
]
