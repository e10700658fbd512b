from datetime import datetime

from pydantic import BaseModel


class CollaboratorResponse(BaseModel):
    name: str
    color: str


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
