from typing import Protocol

from documents.domain.entities import DocumentRecord


class DocumentStore(Protocol):
    async def ensure_schema(self) -> None: ...

    async def get(self, document_id: str) -> DocumentRecord | None: ...

    async def upsert(self, document_id: str, state: bytes | None) -> bool: ...
