"""Manifest sync request/response schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tracegate.schemas.enums import NodeSource
from tracegate.schemas.graph import TraceEdge
from tracegate.utils.canonical import is_strong_hash


class SyncNode(BaseModel):
    """Node as submitted by a sync client."""

    model_config = ConfigDict(extra="ignore")

    gxp_id: str = Field(min_length=1)
    type: str = Field(min_length=1)
    title: str | None = None
    description: str | None = None
    risk: str | None = None
    source: NodeSource | None = None
    file: str | None = None
    line: int | None = None


class SyncRequest(BaseModel):
    """POST /v1/sync/manifest request."""

    product_code: str = Field(min_length=1)
    version: str = Field(min_length=1)
    commit_sha: str = Field(min_length=1)
    manifest_hash: str = Field(min_length=1)
    nodes: list[SyncNode]
    edges: list[TraceEdge]

    @field_validator("manifest_hash", mode="after")
    @classmethod
    def require_sha256(cls, v: str) -> str:
        """Only full sha256 fingerprints are accepted; short checksums are rejected."""
        if not is_strong_hash(v):
            raise ValueError("manifest_hash must be 'sha256:' followed by 64 lowercase hex digits")
        return v

    @model_validator(mode="after")
    def require_unique_identifiers(self) -> "SyncRequest":
        """A manifest holds at most one node per identifier."""
        seen: set[str] = set()
        duplicates: list[str] = []
        for node in self.nodes:
            if node.gxp_id in seen and node.gxp_id not in duplicates:
                duplicates.append(node.gxp_id)
            seen.add(node.gxp_id)
        if duplicates:
            raise ValueError(f"Duplicate node identifiers: {', '.join(duplicates)}")
        return self


class SyncResult(BaseModel):
    """Outcome of a manifest sync."""

    sync_id: str
    manifest_id: str
    nodes_created: int
    edges_created: int
    pending_approvals: list[str] = Field(default_factory=list)
