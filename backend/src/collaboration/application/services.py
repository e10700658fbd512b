from collaboration.application.gateway import PersistenceGateway
from collaboration.domain.entities import AutoSaveParams, LoadParams, Snapshot
from collaboration.infrastructure.yjs_adapter import encode_state_as_update


async def on_load(gateway: PersistenceGateway, params: LoadParams) -> Snapshot:
    return await gateway.load(params.document_id)


async def on_autosave(gateway: PersistenceGateway, params: AutoSaveParams) -> None:
    """Encode the live document and hand it to the gateway; an absent document is a no-op save."""
    state = encode_state_as_update(params.document) if params.document is not None else None
    await gateway.save(params.document_id, state)
