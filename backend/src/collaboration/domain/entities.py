from dataclasses import dataclass

from pycrdt import Doc

# Full CRDT document state, stored and returned byte-for-byte
Snapshot = bytes


@dataclass(frozen=True)
class BlankDocumentShape:
    """Where a blank document keeps its single empty field."""

    root: str = "meta"
    field: str = "docx"


@dataclass
class LoadParams:
    document_id: str


@dataclass
class AutoSaveParams:
    document_id: str
    document: Doc | None = None
