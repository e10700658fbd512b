import ssl

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from shared.config import Settings, settings


class Base(DeclarativeBase):
    pass


def _relaxed_ssl_context() -> ssl.SSLContext:
    """TLS without certificate or hostname verification."""
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def create_engine_from_settings(config: Settings) -> AsyncEngine:
    connect_args = {}
    if config.DATABASE_SSL_NO_VERIFY:
        connect_args["ssl"] = _relaxed_ssl_context()
    return create_async_engine(
        config.DATABASE_URL,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


# Process-wide pool, created before the listener starts accepting connections
engine = create_engine_from_settings(settings)
