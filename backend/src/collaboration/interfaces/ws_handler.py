from fastapi import APIRouter, Depends, WebSocket

from collaboration.infrastructure.engine import Collaboration
from collaboration.interfaces.session_adapter import accept_session
from shared.dependencies import get_collaboration

router = APIRouter()


@router.websocket("/doc/{document_id}")
async def websocket_endpoint(
    websocket: WebSocket,
    document_id: str,
    collaboration: Collaboration = Depends(get_collaboration),
):
    await accept_session(websocket, document_id, collaboration)
