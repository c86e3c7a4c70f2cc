"""Approval workflow tests against a temporary record store."""

import pytest
from pydantic import ValidationError as RequestValidationError

from tracegate.engine.approval import (
    approval_status,
    approve_all_pending,
    approve_node,
    reject_node,
)
from tracegate.engine.audit import list_audit_entries
from tracegate.engine.errors import (
    AlreadyApprovedError,
    ConflictError,
    MissingReasonError,
    NotFoundError,
    ValidationError,
)
from tracegate.schemas.sync import SyncRequest
from tracegate.storage.repositories import get_manifest_by_id, get_node_by_gxp_id
from tracegate.utils.canonical import sha256_digest


async def _node(db, manifest_id, gxp_id):
    return await get_node_by_gxp_id(db, manifest_id, gxp_id)


async def test_sync_creates_pending_nodes(db, make_manifest):
    result = await make_manifest(nodes=[("URS-1", "URS"), ("FRS-1", "FRS")])
    assert result.nodes_created == 2
    assert result.pending_approvals == ["URS-1", "FRS-1"]
    node = await _node(db, result.manifest_id, "URS-1")
    assert node.status == "Pending"
    assert node.approved_by is None

    manifest = await get_manifest_by_id(db, result.manifest_id)
    assert manifest.commit_sha == "abcdef123456"
    assert manifest.manifest_hash.startswith("sha256:")
    assert await get_manifest_by_id(db, "missing") is None


def test_sync_request_rejects_duplicate_identifiers():
    with pytest.raises(RequestValidationError, match="Duplicate node identifiers: URS-1"):
        SyncRequest(
            product_code="REF",
            version="1.0.0",
            commit_sha="abcdef123456",
            manifest_hash=sha256_digest("any"),
            nodes=[{"gxp_id": "URS-1", "type": "URS"}, {"gxp_id": "URS-1", "type": "URS", "title": "dup"}],
            edges=[],
        )


async def test_approve_pending_node(db, make_manifest):
    result = await make_manifest(nodes=[("URS-1", "URS")])
    node = await _node(db, result.manifest_id, "URS-1")

    updated = await approve_node(db, node.id, "qa@example.com", "Looks good")
    assert updated.status == "Approved"
    assert updated.approved_by == "qa@example.com"
    assert updated.approved_at

    entries = await list_audit_entries(db)
    assert entries[0].action == "APPROVAL"
    assert entries[0].details == "Approved URS-1: Looks good"
    assert entries[0].user_id == "qa@example.com"


async def test_second_approval_fails(db, make_manifest):
    result = await make_manifest(nodes=[("URS-1", "URS")])
    node = await _node(db, result.manifest_id, "URS-1")
    await approve_node(db, node.id, "qa@example.com")

    with pytest.raises(AlreadyApprovedError) as exc_info:
        await approve_node(db, node.id, "other@example.com")
    assert isinstance(exc_info.value, ConflictError)
    assert (await _node(db, result.manifest_id, "URS-1")).approved_by == "qa@example.com"


async def test_approve_unknown_node(db):
    with pytest.raises(NotFoundError):
        await approve_node(db, "no-such-node", "qa@example.com")


async def test_reject_requires_reason(db, make_manifest):
    result = await make_manifest(nodes=[("URS-1", "URS")])
    node = await _node(db, result.manifest_id, "URS-1")
    for reason in (None, "", "   "):
        with pytest.raises(MissingReasonError) as exc_info:
            await reject_node(db, node.id, "qa@example.com", reason)
        assert isinstance(exc_info.value, ValidationError)
    assert (await _node(db, result.manifest_id, "URS-1")).status == "Pending"


async def test_reject_unknown_node(db):
    with pytest.raises(NotFoundError):
        await reject_node(db, "no-such-node", "qa@example.com", "wrong")


async def test_reject_is_always_permitted(db, make_manifest):
    result = await make_manifest(nodes=[("URS-1", "URS")])
    node = await _node(db, result.manifest_id, "URS-1")

    await approve_node(db, node.id, "qa@example.com")
    demoted = await reject_node(db, node.id, "lead@example.com", "Missing risk analysis")
    assert demoted.status == "Rejected"
    assert demoted.approved_by == "lead@example.com"

    corrected = await reject_node(db, node.id, "lead2@example.com", "Wrong owner")
    assert corrected.status == "Rejected"
    assert corrected.approved_by == "lead2@example.com"

    entries = await list_audit_entries(db)
    assert entries[0].action == "REJECTION"
    assert entries[0].details == "Rejected URS-1: Wrong owner"

    # a rejected node can still be approved
    approved = await approve_node(db, node.id, "qa@example.com")
    assert approved.status == "Approved"


async def test_approve_all_only_touches_pending(db, make_manifest):
    result = await make_manifest(nodes=[("URS-1", "URS"), ("FRS-1", "FRS"), ("DS-1", "DS")])
    rejected = await _node(db, result.manifest_id, "DS-1")
    await reject_node(db, rejected.id, "qa@example.com", "Incomplete")

    outcome = await approve_all_pending(db, result.manifest_id, "bulk@example.com")
    assert outcome.approved == 2
    assert sorted(n.gxp_id for n in outcome.nodes) == ["FRS-1", "URS-1"]
    assert (await _node(db, result.manifest_id, "DS-1")).status == "Rejected"


async def test_approve_all_skips_individual_failures(db, make_manifest, monkeypatch):
    result = await make_manifest(nodes=[("URS-1", "URS"), ("FRS-1", "FRS")])

    from tracegate.engine import approval

    real_approve = approval.approve_node

    async def flaky_approve(db, node_id, approver_id, comment=None):
        node = await approval.get_node_by_id(db, node_id)
        if node.gxp_id == "URS-1":
            raise AlreadyApprovedError(node.gxp_id)
        return await real_approve(db, node_id, approver_id, comment)

    monkeypatch.setattr(approval, "approve_node", flaky_approve)
    outcome = await approve_all_pending(db, result.manifest_id, "bulk@example.com")
    assert outcome.approved == 1
    assert [n.gxp_id for n in outcome.nodes] == ["FRS-1"]


async def test_approval_status_counts(db, make_manifest):
    result = await make_manifest(nodes=[("URS-1", "URS"), ("FRS-1", "FRS"), ("DS-1", "DS")])
    status = await approval_status(db, result.manifest_id)
    assert (status.total, status.pending, status.approved, status.rejected) == (3, 3, 0, 0)
    assert not status.is_fully_approved

    await approve_all_pending(db, result.manifest_id, "qa@example.com")
    status = await approval_status(db, result.manifest_id)
    assert status.is_fully_approved
    assert status.pending_nodes == []

    ds = await _node(db, result.manifest_id, "DS-1")
    await reject_node(db, ds.id, "qa@example.com", "Superseded")
    status = await approval_status(db, result.manifest_id)
    assert status.rejected == 1
    assert not status.is_fully_approved


async def test_empty_manifest_is_not_fully_approved(db, make_manifest):
    result = await make_manifest(nodes=[])
    status = await approval_status(db, result.manifest_id)
    assert status.total == 0
    assert not status.is_fully_approved


async def test_nodes_are_never_shared_across_manifests(db, make_manifest):
    first = await make_manifest(commit_sha="aaaaaa1", nodes=[("URS-1", "URS")])
    second = await make_manifest(commit_sha="bbbbbb2", nodes=[("URS-1", "URS")])
    node = await _node(db, first.manifest_id, "URS-1")
    await approve_node(db, node.id, "qa@example.com")
    assert (await _node(db, second.manifest_id, "URS-1")).status == "Pending"
