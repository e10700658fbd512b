from pycrdt import Array, Doc, Map

from collaboration.domain.entities import BlankDocumentShape, Snapshot
from collaboration.infrastructure.yjs_adapter import encode_state_as_update


class BlankDocumentProvisioner:
    def __init__(self, shape: BlankDocumentShape | None = None):
        self.shape = shape or BlankDocumentShape()

    def blank(self) -> Snapshot:
        """Encode a fresh document holding one root map with one empty array field."""
        doc = Doc()
        root = doc.get(self.shape.root, type=Map)
        root[self.shape.field] = Array()
        return encode_state_as_update(doc)
