from rentwear.application.interfaces.object_store import ObjectStore


class InMemoryObjectStore(ObjectStore):
    def __init__(self, bucket: str = "clothing-images") -> None:
        self._bucket = bucket
        self.objects: dict[str, tuple[bytes, str | None]] = {}

    async def upload(self, name: str, content: bytes, content_type: str | None) -> str:
        self.objects[name] = (content, content_type)
        return f"memory://{self._bucket}/{name}"
