"""Create the documents table ahead of the first deploy.

Usage:
    python scripts/init_db.py    # uses DATABASE_URL from the environment / .env

Run from the repository root with the project installed (pip install -e .).
"""

import asyncio

from shared.config import settings
from shared.dependencies import document_store
from shared.infrastructure.database import engine
from shared.logging import configure_logging


async def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    try:
        await document_store.ensure_schema()
    finally:
        await engine.dispose()
    print("Done!")


if __name__ == "__main__":
    asyncio.run(main())
