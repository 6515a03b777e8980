import uuid

from rentwear.application.interfaces.identity_resolver import IdentityResolver

ACCOUNT_NAMESPACE = uuid.UUID("6f1c2f1e-3c1a-4f7e-9a55-2b7d0f3e8c10")


class InMemoryIdentityResolver(IdentityResolver):
    """
    Directorio de cuentas en memoria.

    Con auto_register=True cualquier email resuelve a un id estable
    (uuid5 del email), útil para el modo demo.
    """

    def __init__(
        self,
        accounts: dict[str, str] | None = None,
        auto_register: bool = False,
    ) -> None:
        self._accounts = {email.lower(): account_id for email, account_id in (accounts or {}).items()}
        self._auto_register = auto_register

    def register(self, email: str, account_id: str | None = None) -> str:
        normalized = email.strip().lower()
        self._accounts[normalized] = account_id or str(uuid.uuid5(ACCOUNT_NAMESPACE, normalized))
        return self._accounts[normalized]

    async def find_account_id_by_email(self, email: str) -> str | None:
        normalized = email.strip().lower()
        if normalized not in self._accounts and self._auto_register:
            return self.register(normalized)
        return self._accounts.get(normalized)
