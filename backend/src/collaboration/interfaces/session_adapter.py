import logging
from dataclasses import dataclass
from enum import StrEnum
from functools import partial

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from collaboration.infrastructure.engine import Collaboration
from shared.exceptions import GatewayError, GatewayErrorKind

logger = logging.getLogger(__name__)

CLOSE_SERVER_ERROR = 1011
DOCUMENT_UNAVAILABLE = "Document unavailable"
# Close frame reasons are capped at 123 bytes of UTF-8
_MAX_REASON_BYTES = 123


class SessionState(StrEnum):
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class CollaborationSession:
    document_id: str
    state: SessionState = SessionState.CONNECTING


async def accept_session(
    websocket: WebSocket,
    document_id: str,
    collaboration: Collaboration,
) -> CollaborationSession:
    """Accept the socket and hand it to the engine until the session ends."""
    session = CollaborationSession(document_id=document_id)
    logger.info("WebSocket connection attempt for document: %s", document_id)

    await websocket.accept()
    session.state = SessionState.ACTIVE

    try:
        await collaboration.welcome(
            websocket,
            document_id,
            on_error=partial(handle_session_error, websocket, document_id),
        )
        logger.info("WebSocket welcome completed for %s", document_id)
    except Exception as exc:
        logger.error("WebSocket welcome failed for %s: %s", document_id, exc)
        await handle_session_error(websocket, document_id, exc)
    finally:
        session.state = SessionState.CLOSED
        logger.info("Session for %s ended", document_id)

    return session


async def handle_session_error(websocket: WebSocket, document_id: str, error: Exception) -> None:
    kind = error.kind if isinstance(error, GatewayError) else None

    match kind:
        case GatewayErrorKind.LOAD:
            logger.warning("Document load failed for %s: %s", document_id, error)
            await close_transport(websocket, CLOSE_SERVER_ERROR, DOCUMENT_UNAVAILABLE)
        case GatewayErrorKind.SAVE:
            # The next autosave may succeed, keep the editing session alive
            logger.warning("Document save failed for %s: %s", document_id, error)
        case _:
            logger.error("Something went wrong for %s: %s", document_id, error)
            await close_transport(websocket, CLOSE_SERVER_ERROR, str(error) or "Unknown error")


async def close_transport(websocket: WebSocket, code: int, reason: str) -> None:
    if (
        websocket.client_state == WebSocketState.DISCONNECTED
        or websocket.application_state == WebSocketState.DISCONNECTED
    ):
        return
    reason = _truncate_reason(reason)
    logger.info("Closing WebSocket: code=%s, reason=%s", code, reason)
    await websocket.close(code=code, reason=reason)


def _truncate_reason(reason: str) -> str:
    encoded = reason.encode("utf-8")
    if len(encoded) <= _MAX_REASON_BYTES:
        return reason
    return encoded[:_MAX_REASON_BYTES].decode("utf-8", errors="ignore")
