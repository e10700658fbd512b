from pycrdt import Doc


def create_doc(snapshot: bytes | None = None) -> Doc:
    doc = Doc()
    if snapshot:
        doc.apply_update(snapshot)
    return doc


def apply_update(doc: Doc, update: bytes) -> None:
    doc.apply_update(update)


def encode_state_as_update(doc: Doc) -> bytes:
    return doc.get_update()
