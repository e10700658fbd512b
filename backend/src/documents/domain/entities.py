from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class DocumentRecord:
    id: str
    state: bytes
    created_at: datetime | None = field(default=None)
    updated_at: datetime | None = field(default=None)
