import asyncio
import logging
from collections.abc import Awaitable, Callable

from fastapi import WebSocket, WebSocketDisconnect
from pycrdt import Doc

from collaboration.domain.entities import AutoSaveParams, LoadParams, Snapshot
from collaboration.infrastructure.yjs_adapter import apply_update, create_doc, encode_state_as_update
from shared.exceptions import UnsupportedFrameError

logger = logging.getLogger(__name__)

LoadFn = Callable[[LoadParams], Awaitable[Snapshot]]
AutoSaveFn = Callable[[AutoSaveParams], Awaitable[None]]
ErrorFn = Callable[[Exception], Awaitable[None]]


class DocumentRoom:
    """Live state of one document shared by every connection editing it."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        self.doc: Doc | None = None
        self.connections: dict[WebSocket, ErrorFn | None] = {}
        self.loading: asyncio.Task | None = None
        self.save_timer: asyncio.Task | None = None
        self.saves: set[asyncio.Task] = set()
        self.dirty = False


class Collaboration:
    """In-process CRDT collaboration engine.

    Each connection receives the full document state as one binary frame on
    join; every binary frame it sends afterwards is a CRDT update that is
    applied to the shared document and relayed to the other connections.
    Persistence goes through the `on_load` / `on_autosave` callbacks only.
    """

    def __init__(
        self,
        on_load: LoadFn,
        on_autosave: AutoSaveFn,
        name: str = "Collaboration service",
        debounce: float = 2.0,
    ):
        self.name = name
        self.debounce = debounce
        self.on_load = on_load
        self.on_autosave = on_autosave
        self._rooms: dict[str, DocumentRoom] = {}

    def room(self, document_id: str) -> DocumentRoom | None:
        return self._rooms.get(document_id)

    async def welcome(
        self,
        websocket: WebSocket,
        document_id: str,
        on_error: ErrorFn | None = None,
    ) -> None:
        """Run one session until the client disconnects."""
        room = await self._join(websocket, document_id, on_error)
        try:
            await self._serve(room, websocket)
        except WebSocketDisconnect as exc:
            logger.info(
                "WebSocket closed for %s: code=%s, reason=%s",
                document_id,
                exc.code,
                exc.reason or "none",
            )
        except BaseException:
            # The session error wins over a failing final save
            try:
                await self._leave(room, websocket)
            except Exception as flush_exc:
                logger.warning("Final save for %s failed after a session error: %s", document_id, flush_exc)
            raise
        await self._leave(room, websocket)

    async def _serve(self, room: DocumentRoom, websocket: WebSocket) -> None:
        await websocket.send_bytes(encode_state_as_update(room.doc))
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
            update = message.get("bytes")
            if update is None:
                raise UnsupportedFrameError("Only binary update frames are accepted")
            apply_update(room.doc, update)
            room.dirty = True
            await self._relay(room, websocket, update)
            self._schedule_save(room)

    async def _leave(self, room: DocumentRoom, websocket: WebSocket) -> None:
        room.connections.pop(websocket, None)
        if not room.connections:
            await self._close_room(room)

    async def _join(self, websocket: WebSocket, document_id: str, on_error: ErrorFn | None) -> DocumentRoom:
        room = self._rooms.get(document_id)
        if room is None:
            room = DocumentRoom(document_id)
            self._rooms[document_id] = room
            room.loading = asyncio.create_task(self._load(room))

        try:
            await asyncio.shield(room.loading)
        except Exception:
            if self._rooms.get(document_id) is room:
                del self._rooms[document_id]
            raise

        room.connections[websocket] = on_error
        return room

    async def _load(self, room: DocumentRoom) -> None:
        state = await self.on_load(LoadParams(document_id=room.document_id))
        room.doc = create_doc(state)

    async def _relay(self, room: DocumentRoom, sender: WebSocket, update: bytes) -> None:
        for ws in list(room.connections):
            if ws is sender:
                continue
            try:
                await ws.send_bytes(update)
            except Exception as exc:
                logger.debug("Relay to a peer of %s failed: %s", room.document_id, exc)

    def _schedule_save(self, room: DocumentRoom) -> None:
        if room.save_timer is not None:
            room.save_timer.cancel()
        room.save_timer = asyncio.create_task(self._debounced_save(room))

    async def _debounced_save(self, room: DocumentRoom) -> None:
        await asyncio.sleep(self.debounce)
        # Past this point the write is no longer cancellable
        room.save_timer = None
        task = asyncio.create_task(self._background_save(room))
        room.saves.add(task)
        task.add_done_callback(room.saves.discard)

    async def _background_save(self, room: DocumentRoom) -> None:
        try:
            await self._save(room)
        except Exception as exc:
            logger.warning("Autosave failed for %s: %s", room.document_id, exc)
            for on_error in list(room.connections.values()):
                if on_error is not None:
                    await on_error(exc)

    async def _save(self, room: DocumentRoom) -> None:
        room.dirty = False
        try:
            await self.on_autosave(AutoSaveParams(document_id=room.document_id, document=room.doc))
        except Exception:
            room.dirty = True
            raise

    async def _close_room(self, room: DocumentRoom) -> None:
        # The room stays registered until the final save lands, so a client
        # joining meanwhile reuses the in-memory document instead of reloading
        if room.save_timer is not None:
            room.save_timer.cancel()
            room.save_timer = None
        try:
            if room.saves:
                await asyncio.gather(*room.saves, return_exceptions=True)
            if room.dirty:
                await self._save(room)
        finally:
            if not room.connections and self._rooms.get(room.document_id) is room:
                del self._rooms[room.document_id]
