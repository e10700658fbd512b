import asyncio
import os

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from starlette.websockets import WebSocketState

from collaboration.application.gateway import PersistenceGateway
from collaboration.application.provisioner import BlankDocumentProvisioner
from documents.domain.entities import DocumentRecord
from documents.infrastructure.document_repository import DbDocumentStore
from main import app
from shared.infrastructure.database import Base

import documents.infrastructure.models  # noqa: F401


@pytest.fixture
async def test_engine(tmp_path):
    # Set TEST_DATABASE_URL to run the store tests against PostgreSQL
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}"
    engine = create_async_engine(url, echo=False)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def store(test_engine):
    store = DbDocumentStore(test_engine)
    await store.ensure_schema()
    return store


@pytest.fixture
def gateway(store):
    return PersistenceGateway(store, BlankDocumentProvisioner())


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class InMemoryDocumentStore:
    """Dict-backed store with switchable failures."""

    def __init__(self):
        self.records: dict[str, DocumentRecord] = {}
        self.fail_get: Exception | None = None
        self.fail_upsert: Exception | None = None
        self.upsert_result = True
        self.upsert_calls: list[tuple[str, bytes | None]] = []

    async def ensure_schema(self) -> None:
        return None

    async def get(self, document_id: str) -> DocumentRecord | None:
        if self.fail_get:
            raise self.fail_get
        return self.records.get(document_id)

    async def upsert(self, document_id: str, state: bytes | None) -> bool:
        self.upsert_calls.append((document_id, state))
        if self.fail_upsert:
            raise self.fail_upsert
        if state is None or not self.upsert_result:
            return False
        self.records[document_id] = DocumentRecord(id=document_id, state=state)
        return True


@pytest.fixture
def memory_store():
    return InMemoryDocumentStore()


class FakeWebSocket:
    """Transport double: frames fed through `incoming` (bytes or text), `None` means the client hung up."""

    def __init__(self):
        self.incoming: asyncio.Queue = asyncio.Queue()
        self.sent: list[bytes] = []
        self.accepted = False
        self.close_code: int | None = None
        self.close_reason: str | None = None
        self.client_state = WebSocketState.CONNECTING
        self.application_state = WebSocketState.CONNECTING

    async def accept(self):
        self.accepted = True
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_bytes(self, data: bytes):
        self.sent.append(data)

    async def receive(self) -> dict:
        data = await self.incoming.get()
        if data is None:
            self.client_state = WebSocketState.DISCONNECTED
            return {"type": "websocket.disconnect", "code": 1000}
        if isinstance(data, str):
            return {"type": "websocket.receive", "text": data}
        return {"type": "websocket.receive", "bytes": data}

    async def close(self, code: int = 1000, reason: str | None = None):
        self.close_code = code
        self.close_reason = reason
        self.application_state = WebSocketState.DISCONNECTED

    @property
    def closed(self) -> bool:
        return self.close_code is not None


async def wait_until(condition, timeout: float = 2.0) -> None:
    async def _poll():
        while not condition():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout)


@pytest.fixture
def make_websocket():
    return FakeWebSocket


@pytest.fixture
def wait_for():
    return wait_until
