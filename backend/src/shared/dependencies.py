from functools import partial

from collaboration.application.gateway import PersistenceGateway
from collaboration.application.provisioner import BlankDocumentProvisioner
from collaboration.application.services import on_autosave, on_load
from collaboration.domain.entities import BlankDocumentShape
from collaboration.infrastructure.engine import Collaboration
from documents.infrastructure.document_repository import DbDocumentStore
from shared.config import settings
from shared.infrastructure.database import engine

document_store = DbDocumentStore(engine)

gateway = PersistenceGateway(
    document_store,
    BlankDocumentProvisioner(
        BlankDocumentShape(root=settings.BLANK_DOCUMENT_ROOT, field=settings.BLANK_DOCUMENT_FIELD)
    ),
)

collaboration = Collaboration(
    on_load=partial(on_load, gateway),
    on_autosave=partial(on_autosave, gateway),
    name="Document collaboration service",
    debounce=settings.AUTOSAVE_DEBOUNCE_SECONDS,
)


def get_collaboration() -> Collaboration:
    return collaboration
