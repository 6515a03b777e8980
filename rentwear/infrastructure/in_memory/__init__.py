"""Adaptadores en memoria para modo demo y pruebas."""

from rentwear.infrastructure.in_memory.identity_resolver import InMemoryIdentityResolver
from rentwear.infrastructure.in_memory.idempotency_repo import InMemoryIdempotencyRepo
from rentwear.infrastructure.in_memory.listing_repo import InMemoryListingRepo
from rentwear.infrastructure.in_memory.object_store import InMemoryObjectStore
from rentwear.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from rentwear.infrastructure.in_memory.rental_repo import InMemoryRentalRepo
from rentwear.infrastructure.in_memory.transaction_manager import NoopTransactionManager

__all__ = [
    "InMemoryIdentityResolver",
    "InMemoryIdempotencyRepo",
    "InMemoryListingRepo",
    "InMemoryObjectStore",
    "InMemoryRentalRepo",
    "NoopTransactionManager",
    "StubPaymentGateway",
]
