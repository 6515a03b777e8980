import logging
from urllib.parse import quote

import httpx

from rentwear.application.interfaces.object_store import ObjectStore
from rentwear.infrastructure.circuit_breaker import CircuitBreakerError, object_store_breaker

logger = logging.getLogger(__name__)


class ObjectStoreError(Exception):
    """The object store rejected or failed the upload."""


class HttpObjectStore(ObjectStore):
    def __init__(
        self,
        base_url: str,
        bucket: str,
        api_key: str | None,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._bucket = bucket
        self._timeout = timeout_seconds
        self._transport = transport
        self._headers = {}
        if api_key:
            self._headers = {"apikey": api_key, "Authorization": f"Bearer {api_key}"}

    async def upload(self, name: str, content: bytes, content_type: str | None) -> str:
        object_path = f"{self._bucket}/{quote(name)}"
        headers = {
            **self._headers,
            "Content-Type": content_type or "application/octet-stream",
            "x-upsert": "true",
        }

        try:
            with object_store_breaker.calling():
                async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                    response = await client.post(
                        f"{self._base_url}/object/{object_path}",
                        content=content,
                        headers=headers,
                    )
                response.raise_for_status()
        except CircuitBreakerError as exc:
            logger.error("Object store circuit breaker is open", extra={"circuit_state": str(exc)})
            raise ObjectStoreError("Object store temporarily unavailable") from exc
        except httpx.HTTPError as exc:
            logger.error("Image upload failed", exc_info=exc, extra={"object": name})
            raise ObjectStoreError("Image upload failed") from exc

        return f"{self._base_url}/object/public/{object_path}"
