import logging
from typing import Any

import httpx

from rentwear.application.interfaces.identity_resolver import IdentityResolver
from rentwear.infrastructure.circuit_breaker import CircuitBreakerError, identity_breaker

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """The identity provider could not answer the lookup."""


class HttpIdentityResolver(IdentityResolver):
    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Account lookup against the identity provider's admin API.

        Args:
            base_url: Base URL of the identity provider
            api_key: Service key sent as bearer token and apikey header
            timeout_seconds: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._transport = transport
        self._headers = {}
        if api_key:
            self._headers = {"apikey": api_key, "Authorization": f"Bearer {api_key}"}

    async def find_account_id_by_email(self, email: str) -> str | None:
        url = f"{self._base_url}/admin/accounts"

        try:
            with identity_breaker.calling():
                async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                    response = await client.get(url, params={"email": email}, headers=self._headers)
                if response.status_code >= 500:
                    response.raise_for_status()
        except CircuitBreakerError as exc:
            logger.error("Identity circuit breaker is open", extra={"circuit_state": str(exc)})
            raise IdentityProviderError("Identity provider temporarily unavailable") from exc
        except httpx.HTTPError as exc:
            logger.error("Identity provider request failed", exc_info=exc)
            raise IdentityProviderError("Identity provider request failed") from exc

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise IdentityProviderError(f"Unexpected identity provider status {response.status_code}")

        body: Any = response.json()
        account = body.get("account") if isinstance(body, dict) else None
        if not account:
            return None
        # The provider matches on email; guard against partial matches anyway.
        if (account.get("email") or "").lower() != email.lower():
            return None
        return str(account["id"])
