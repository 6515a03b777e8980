"""
Circuit Breaker configuration for external service calls.

This module provides pre-configured Circuit Breakers for the payment
processor, the identity provider and the object store, so a failing
dependency fails fast instead of piling up blocked requests.

Circuit Breaker Pattern:
- CLOSED: Normal operation, requests pass through
- OPEN: Too many failures, requests fail immediately
- HALF_OPEN: Testing if service recovered, limited requests allowed

Configuration:
- fail_max: Number of consecutive failures before opening circuit
- reset_timeout: Seconds to wait before attempting recovery (HALF_OPEN)
- exclude: Exceptions that don't count as failures
"""

import logging

import stripe
from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

logger = logging.getLogger(__name__)


class StateChangeLogger(CircuitBreakerListener):
    """Logs circuit breaker state changes for monitoring and alerting."""

    def __init__(self, name: str):
        self.name = name

    def state_change(self, cb, old_state, new_state):
        logger.warning(
            "Circuit breaker state changed",
            extra={
                "breaker_name": self.name,
                "old_state": old_state.name if old_state else None,
                "new_state": new_state.name,
            },
        )


# Card declines and invalid requests are answers from a healthy processor,
# not outages, so they don't trip the breaker.
payment_breaker = CircuitBreaker(
    fail_max=5,
    reset_timeout=60,
    name="payment_circuit_breaker",
    exclude=[stripe.CardError, stripe.InvalidRequestError],
    listeners=[StateChangeLogger("payment")],
)

identity_breaker = CircuitBreaker(
    fail_max=5,
    reset_timeout=30,
    name="identity_circuit_breaker",
    listeners=[StateChangeLogger("identity")],
)

object_store_breaker = CircuitBreaker(
    fail_max=5,
    reset_timeout=30,
    name="object_store_circuit_breaker",
    listeners=[StateChangeLogger("object_store")],
)


__all__ = [
    "CircuitBreakerError",
    "identity_breaker",
    "object_store_breaker",
    "payment_breaker",
]
