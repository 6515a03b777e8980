class ObjectStore:
    async def upload(self, name: str, content: bytes, content_type: str | None) -> str:
        """Sube el objeto y regresa su URL pública."""
        raise NotImplementedError
