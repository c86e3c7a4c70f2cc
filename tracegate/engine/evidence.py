"""Test evidence intake for the current manifest."""

from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.engine.audit import record_audit
from tracegate.engine.errors import NotFoundError
from tracegate.schemas.enums import AuditAction, TestStatus
from tracegate.schemas.evidence import (
    EvidenceOut,
    EvidenceRequest,
    EvidenceSummary,
    EvidenceUploadResult,
    TestResult,
)
from tracegate.storage.repositories import (
    create_evidence,
    get_evidence_by_manifest,
    get_latest_manifest,
)


def summarize_results(results: list[TestResult]) -> EvidenceSummary:
    statuses = [TestStatus(r.status) for r in results]
    return EvidenceSummary(
        total=len(results),
        passed=statuses.count(TestStatus.PASSED),
        failed=statuses.count(TestStatus.FAILED),
        skipped=statuses.count(TestStatus.SKIPPED),
    )


async def upload_evidence(
    db: AsyncSession, payload: EvidenceRequest, user_id: str
) -> EvidenceUploadResult:
    """Attach a test execution record to the current manifest."""
    manifest = await get_latest_manifest(db)
    if manifest is None:
        raise NotFoundError("No manifest found. Please sync a manifest first.")

    evidence = await create_evidence(
        db,
        manifest_id=manifest.id,
        execution_id=payload.execution_id,
        results_json=[r.model_dump(mode="json") for r in payload.results],
        commit_sha=payload.commit_sha,
        environment=payload.environment,
        executed_at=payload.executed_at,
    )
    summary = summarize_results(payload.results)
    await record_audit(
        db,
        AuditAction.EVIDENCE_UPLOAD,
        user_id,
        f"Uploaded execution evidence ({summary.passed} passed, {summary.failed} failed)",
    )
    return EvidenceUploadResult(
        evidence_id=evidence.id, manifest_id=manifest.id, summary=summary
    )


async def list_evidence(db: AsyncSession) -> tuple[str, list[EvidenceOut]]:
    """Evidence attached to the current manifest, oldest first."""
    manifest = await get_latest_manifest(db)
    if manifest is None:
        raise NotFoundError("No manifest found")
    rows = await get_evidence_by_manifest(db, manifest.id)
    return manifest.id, [EvidenceOut.model_validate(e) for e in rows]
