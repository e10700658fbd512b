import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from documents.domain.entities import DocumentRecord
from documents.infrastructure.models import DocumentModel

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class DbDocumentStore:
    def __init__(self, engine: AsyncEngine):
        if engine.dialect.name not in _UPSERT_INSERTS:
            raise ValueError(f"Unsupported database dialect: {engine.dialect.name}")
        self.engine = engine
        self.session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def ensure_schema(self) -> None:
        """Create the documents table if it does not exist. Safe on every start."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(DocumentModel.__table__.create, checkfirst=True)
        except Exception:
            logger.exception("Failed to initialize database")
            raise
        logger.info("Database initialized successfully")

    async def get(self, document_id: str) -> DocumentRecord | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(DocumentModel).where(DocumentModel.id == document_id)
            )
            model = result.scalar_one_or_none()
            return _to_entity(model) if model else None

    async def upsert(self, document_id: str, state: bytes | None) -> bool:
        if state is None:
            logger.warning("No state provided for document %s", document_id)
            return False

        insert = _UPSERT_INSERTS[self.engine.dialect.name]
        stmt = insert(DocumentModel).values(
            id=document_id,
            state=bytes(state),
            updated_at=datetime.now(timezone.utc),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DocumentModel.id],
            set_={"state": stmt.excluded.state, "updated_at": stmt.excluded.updated_at},
        )
        async with self.session_factory() as session:
            await session.execute(stmt)
            await session.commit()

        logger.info("Saved document %s to database", document_id)
        return True


def _to_entity(model: DocumentModel) -> DocumentRecord:
    return DocumentRecord(
        id=model.id,
        state=model.state,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )
