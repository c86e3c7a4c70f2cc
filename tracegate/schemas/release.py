"""Release readiness schemas."""

from pydantic import BaseModel, Field


class Condition(BaseModel):
    """One gating condition and whether it passed."""

    name: str
    passed: bool
    details: str


class ReleaseToken(BaseModel):
    """Issued Release Readiness Token (RRT)."""

    token: str
    issued_at: str
    expires_at: str
    product_code: str
    version: str
    commit_sha: str


class ReleaseReadiness(BaseModel):
    """Outcome of a readiness check for one commit."""

    is_ready: bool
    commit_sha: str
    manifest_hash: str | None = None
    conditions: list[Condition] = Field(default_factory=list)
    blocking_issues: list[str] = Field(default_factory=list)
    rrt: ReleaseToken | None = None
