"""Manifest, node and approval schemas."""

from pydantic import BaseModel, ConfigDict, Field


class ManifestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_code: str
    version: str
    commit_sha: str
    manifest_hash: str
    synced_at: str


class NodeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    manifest_id: str
    gxp_id: str
    type: str
    title: str | None = None
    description: str | None = None
    risk: str | None = None
    source: str | None = None
    file: str | None = None
    line: int | None = None
    status: str
    approved_by: str | None = None
    approved_at: str | None = None


class EdgeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    manifest_id: str
    source_id: str
    target_id: str


class ManifestGraph(BaseModel):
    """Manifest with its nodes and edges."""

    manifest: ManifestOut
    nodes: list[NodeOut] = Field(default_factory=list)
    edges: list[EdgeOut] = Field(default_factory=list)


class ApproveRequest(BaseModel):
    """POST /v1/nodes/{id}/approve request."""

    approved_by: str | None = None
    comment: str | None = None


class RejectRequest(BaseModel):
    """POST /v1/nodes/{id}/reject request. Reason is enforced by the workflow."""

    rejected_by: str | None = None
    reason: str | None = None


class ApproveAllRequest(BaseModel):
    """POST /v1/demo/approve-all request."""

    approved_by: str | None = None


class ApprovalStatus(BaseModel):
    """Aggregate approval state of one manifest."""

    total: int
    approved: int
    pending: int
    rejected: int
    pending_nodes: list[NodeOut] = Field(default_factory=list)
    is_fully_approved: bool


class ApproveAllResult(BaseModel):
    approved: int
    nodes: list[NodeOut] = Field(default_factory=list)
