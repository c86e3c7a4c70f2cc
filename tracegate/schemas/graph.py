"""Trace graph schemas produced by the scanner and graph builder."""

from pydantic import BaseModel, Field

from tracegate.schemas.enums import NodeSource


class Annotation(BaseModel):
    """One @gxp-* block extracted from a source or test file."""

    gxp_id: str
    type: str = "TC"
    title: str | None = None
    description: str | None = None
    traces: list[str] = Field(default_factory=list)
    risk: str | None = None
    file: str
    line: int


class SpecDocument(BaseModel):
    """Specification document parsed from Markdown front matter."""

    gxp_id: str = "UNKNOWN"
    type: str = "URS"
    title: str = "Untitled"
    description: str = ""
    traces: list[str] = Field(default_factory=list)
    risk: str = "Medium"
    file: str | None = None


class ProductManifest(BaseModel):
    """Top-level product manifest (gxp-product.md)."""

    product_name: str = "Unknown"
    version: str = "0.0.0"
    product_code: str = "UNK"
    id_schema: str = "URS | FRS | DS | TC"
    sync: dict = Field(
        default_factory=lambda: {"mode": "repo-first", "system_of_record_id": "default"}
    )
    gxp_metadata: dict = Field(
        default_factory=lambda: {"gamp_category": 5, "risk_impact": "Medium"}
    )


class TraceNode(BaseModel):
    """Requirement, specification or test artifact in the trace graph."""

    gxp_id: str
    type: str
    title: str | None = None
    description: str | None = None
    risk: str | None = None
    source: NodeSource
    file: str | None = None
    line: int | None = None


class TraceEdge(BaseModel):
    """Directed traces-to link; either end may be absent from the node set."""

    source: str
    target: str


class TraceGraph(BaseModel):
    """Deduplicated, canonically ordered graph with its fingerprint."""

    product_code: str
    product_name: str = "Unknown"
    version: str
    nodes: list[TraceNode] = Field(default_factory=list)
    edges: list[TraceEdge] = Field(default_factory=list)
    manifest_hash: str
