from rentwear.application.interfaces.idempotency_repo import IdempotencyRecord, IdempotencyRepo


class InMemoryIdempotencyRepo(IdempotencyRepo):
    def __init__(self) -> None:
        self._records: dict[tuple[str, str], IdempotencyRecord] = {}

    async def get(self, scope: str, idem_key: str) -> IdempotencyRecord | None:
        return self._records.get((scope, idem_key))

    async def save(self, record: IdempotencyRecord) -> None:
        self._records[(record.scope, record.idem_key)] = record
