"""Test evidence schemas."""

from pydantic import BaseModel, ConfigDict, Field

from tracegate.schemas.enums import TestStatus


class TestResult(BaseModel):
    """Result of one test execution, keyed by trace identifier."""

    __test__ = False  # not a pytest class
    model_config = ConfigDict(use_enum_values=True)

    gxp_id: str
    name: str = ""
    status: TestStatus
    duration_ms: float | None = None
    logs: list[str] | None = None


class EvidenceRequest(BaseModel):
    """POST /v1/evidence/upload request."""

    execution_id: str = Field(min_length=1)
    results: list[TestResult]
    commit_sha: str | None = None
    environment: str | None = None
    executed_at: str | None = None


class EvidenceSummary(BaseModel):
    total: int
    passed: int
    failed: int
    skipped: int


class EvidenceUploadResult(BaseModel):
    evidence_id: str
    manifest_id: str
    summary: EvidenceSummary


class EvidenceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    manifest_id: str
    execution_id: str
    commit_sha: str | None = None
    environment: str | None = None
    executed_at: str | None = None
    created_at: str
    results: list[TestResult] = Field(
        default_factory=list, validation_alias="results_json"
    )
