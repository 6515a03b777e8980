class IdentityResolver:
    async def find_account_id_by_email(self, email: str) -> str | None:
        """Búsqueda directa por email en el proveedor de identidad."""
        raise NotImplementedError
