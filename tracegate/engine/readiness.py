"""Release readiness gate and Release Readiness Token (RRT) issuance.

The gate reads node and evidence state for the manifest synced at an exact
commit, evaluates three conditions, and issues an RRT when all pass.

The RRT signature segment is a placeholder, not a cryptographic signature.
Consumers must not treat the token as proof of authenticity.
"""

import base64
import json
import logging
import time
from datetime import timedelta
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.config import settings
from tracegate.engine.audit import record_audit
from tracegate.engine.errors import ValidationError
from tracegate.models import Evidence, Manifest, Node
from tracegate.schemas.enums import AuditAction, NodeStatus, TestStatus
from tracegate.schemas.release import Condition, ReleaseReadiness, ReleaseToken
from tracegate.storage.repositories import (
    get_latest_evidence,
    get_manifest_by_sha,
    get_nodes_by_manifest,
)
from tracegate.utils.clock import to_iso, utcnow

logger = logging.getLogger(__name__)

SYSTEM_USER = "system"
MIN_SHA_LENGTH = 6

COND_MANIFEST_SYNCED = "Manifest synced"
COND_APPROVED = "All requirements approved"
COND_HASH = "Manifest hash matches"
COND_TESTS = "All tests passed"


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def generate_rrt(manifest: Manifest, commit_sha: str, issued_at: int) -> str:
    """Three base64url segments: header.payload.signature (placeholder)."""
    header = {"alg": "HS256", "typ": "JWT"}
    payload = {
        "iss": settings.rrt_issuer,
        "sub": manifest.product_code,
        "ver": manifest.version,
        "sha": commit_sha,
        "hash": manifest.manifest_hash,
        "iat": issued_at,
        "exp": issued_at + settings.rrt_validity_hours * 3600,
        "jti": str(uuid4()),
    }
    # Not a MAC: see module docstring
    signature = f"demo-signature-{manifest.id}-{time.time_ns() // 1_000_000}"
    return ".".join(
        _b64url(part)
        for part in (
            json.dumps(header, separators=(",", ":")).encode(),
            json.dumps(payload, separators=(",", ":")).encode(),
            signature.encode(),
        )
    )


def decode_rrt(token: str) -> dict:
    """Decode the payload segment of an RRT. Does not verify the signature."""
    parts = token.split(".") if token else []
    if len(parts) != 3:
        raise ValidationError("RRT must have three segments")
    try:
        payload = json.loads(_b64url_decode(parts[1]))
    except (ValueError, UnicodeDecodeError) as exc:
        raise ValidationError(f"Malformed RRT payload: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Malformed RRT payload")
    return payload


def validate_commit_sha(commit_sha: str) -> str:
    sha = (commit_sha or "").strip()
    if len(sha) < MIN_SHA_LENGTH:
        raise ValidationError(f"Invalid commit SHA: must be at least {MIN_SHA_LENGTH} characters")
    return sha


def check_approvals(nodes: list[Node]) -> tuple[Condition, list[str]]:
    pending = [n.gxp_id for n in nodes if n.status == NodeStatus.PENDING.value]
    rejected = [n.gxp_id for n in nodes if n.status == NodeStatus.REJECTED.value]
    approved = sum(1 for n in nodes if n.status == NodeStatus.APPROVED.value)
    issues = []
    if pending:
        issues.append(f"Missing approvals: {', '.join(pending)}")
    if rejected:
        issues.append(f"Rejected: {', '.join(rejected)}")
    condition = Condition(
        name=COND_APPROVED,
        passed=not pending and not rejected,
        details=f"{approved}/{len(nodes)} approved",
    )
    return condition, issues


def check_manifest_hash(
    manifest: Manifest, expected_hash: str | None
) -> tuple[Condition, list[str]]:
    recorded = manifest.manifest_hash
    if expected_hash is None or expected_hash == recorded:
        return Condition(name=COND_HASH, passed=True, details=f"Hash: {recorded}"), []
    return (
        Condition(
            name=COND_HASH,
            passed=False,
            details=f"Hash: {recorded} (expected {expected_hash})",
        ),
        [f"Manifest hash mismatch: expected {expected_hash}, recorded {recorded}"],
    )


def check_tests(evidence: Evidence | None) -> tuple[Condition, list[str]]:
    if evidence is None:
        # Missing evidence does not block (demo mode)
        return (
            Condition(name=COND_TESTS, passed=True, details="No evidence required (demo mode)"),
            [],
        )
    results = evidence.results_json or []
    passed = sum(1 for r in results if r.get("status") == TestStatus.PASSED.value)
    failed = [r.get("gxp_id", "?") for r in results if r.get("status") == TestStatus.FAILED.value]
    issues = [f"Test failed: {', '.join(failed)}"] if failed else []
    return (
        Condition(
            name=COND_TESTS,
            passed=not failed,
            details=f"{passed}/{len(results)} tests passed",
        ),
        issues,
    )


async def check_release_readiness(
    db: AsyncSession, commit_sha: str, expected_hash: str | None = None
) -> ReleaseReadiness:
    """Evaluate readiness for one commit; issues an RRT when every condition passes.

    Never mutates nodes or evidence. Appends one RRT_ISSUED audit entry when a
    token is issued.
    """
    commit_sha = validate_commit_sha(commit_sha)
    manifest = await get_manifest_by_sha(db, commit_sha)
    if manifest is None:
        return ReleaseReadiness(
            is_ready=False,
            commit_sha=commit_sha,
            conditions=[
                Condition(
                    name=COND_MANIFEST_SYNCED,
                    passed=False,
                    details="No manifest found for this commit",
                )
            ],
            blocking_issues=[f"No manifest found for commit {commit_sha}"],
        )

    nodes = await get_nodes_by_manifest(db, manifest.id)
    evidence = await get_latest_evidence(db, manifest.id)

    conditions: list[Condition] = []
    blocking_issues: list[str] = []
    for condition, issues in (
        check_approvals(nodes),
        check_manifest_hash(manifest, expected_hash),
        check_tests(evidence),
    ):
        conditions.append(condition)
        blocking_issues.extend(issues)

    result = ReleaseReadiness(
        is_ready=all(c.passed for c in conditions),
        commit_sha=commit_sha,
        manifest_hash=manifest.manifest_hash,
        conditions=conditions,
        blocking_issues=blocking_issues,
    )

    if result.is_ready:
        now = utcnow().replace(microsecond=0)
        result.rrt = ReleaseToken(
            token=generate_rrt(manifest, commit_sha, int(now.timestamp())),
            issued_at=to_iso(now),
            expires_at=to_iso(now + timedelta(hours=settings.rrt_validity_hours)),
            product_code=manifest.product_code,
            version=manifest.version,
            commit_sha=commit_sha,
        )
        await record_audit(
            db,
            AuditAction.RRT_ISSUED,
            SYSTEM_USER,
            f"RRT issued for {manifest.product_code} v{manifest.version} @ {commit_sha[:7]}",
        )
    else:
        logger.info("Commit %s not ready: %s", commit_sha, "; ".join(blocking_issues))
    return result
