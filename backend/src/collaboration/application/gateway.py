import asyncio
import logging
from weakref import WeakValueDictionary

from collaboration.application.provisioner import BlankDocumentProvisioner
from collaboration.domain.entities import Snapshot
from documents.domain.repository import DocumentStore
from shared.exceptions import LoadError, SaveError

logger = logging.getLogger(__name__)


class PersistenceGateway:
    """Load and save document snapshots on behalf of the collaboration engine.

    Storage failures are re-raised as `LoadError` or `SaveError` so the
    session layer can decide what to do with the socket without knowing
    anything about the database. Saves to the same document are serialized
    with a per-document lock; saves to different documents run in parallel.
    """

    def __init__(self, store: DocumentStore, provisioner: BlankDocumentProvisioner):
        self.store = store
        self.provisioner = provisioner
        self._save_locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()

    async def load(self, document_id: str) -> Snapshot:
        try:
            record = await self.store.get(document_id)
            if record is None:
                logger.info("Document %s not found, creating blank document", document_id)
                return self.provisioner.blank()
        except Exception as exc:
            logger.error("Failed to load document %s: %s", document_id, exc)
            raise LoadError(f"Failed to load document {document_id}: {exc}", cause=exc) from exc

        logger.info("Loaded document %s from database", document_id)
        return Snapshot(record.state)

    async def save(self, document_id: str, state: Snapshot | None) -> None:
        if state is None:
            logger.info("Nothing to save for document %s, skipping", document_id)
            return

        async with self._lock_for(document_id):
            try:
                success = await self.store.upsert(document_id, state)
            except Exception as exc:
                logger.error("Failed to save document %s: %s", document_id, exc)
                raise SaveError(f"Failed to save document {document_id}: {exc}", cause=exc) from exc

        if not success:
            raise SaveError(f"Failed to save document {document_id}: save returned false")

    def _lock_for(self, document_id: str) -> asyncio.Lock:
        lock = self._save_locks.get(document_id)
        if lock is None:
            lock = asyncio.Lock()
            self._save_locks[document_id] = lock
        return lock
