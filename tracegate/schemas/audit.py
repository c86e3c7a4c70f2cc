"""Audit log schemas."""

from pydantic import BaseModel, ConfigDict, Field


class AuditEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    timestamp: str
    action: str
    user_id: str | None = None
    details: str | None = None
    payload_hash: str


class AuditLogResponse(BaseModel):
    entries: list[AuditEntryOut] = Field(default_factory=list)
    count: int
