"""Approval workflow - Pending -> Approved | Rejected per node."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.engine.audit import record_audit
from tracegate.engine.errors import (
    AlreadyApprovedError,
    MissingReasonError,
    NotFoundError,
    TraceGateError,
)
from tracegate.models import Node
from tracegate.schemas.enums import AuditAction, NodeStatus
from tracegate.schemas.nodes import ApprovalStatus, ApproveAllResult, NodeOut
from tracegate.storage.repositories import (
    get_node_by_id,
    get_nodes_by_manifest,
    get_pending_nodes,
    update_node_status,
)

logger = logging.getLogger(__name__)


async def _require_node(db: AsyncSession, node_id: str) -> Node:
    node = await get_node_by_id(db, node_id)
    if node is None:
        raise NotFoundError(f"Node {node_id} not found")
    return node


async def approve_node(
    db: AsyncSession, node_id: str, approver_id: str, comment: str | None = None
) -> Node:
    """Approve a node. Approving an already-approved node is a conflict."""
    node = await _require_node(db, node_id)
    if node.status == NodeStatus.APPROVED.value:
        raise AlreadyApprovedError(node.gxp_id)

    node = await update_node_status(db, node, NodeStatus.APPROVED, approver_id)
    details = f"Approved {node.gxp_id}"
    if comment:
        details += f": {comment}"
    await record_audit(db, AuditAction.APPROVAL, approver_id, details)
    return node


async def reject_node(
    db: AsyncSession, node_id: str, rejector_id: str, reason: str | None
) -> Node:
    """Reject a node from any state. A reason is mandatory."""
    if not reason or not reason.strip():
        raise MissingReasonError()
    node = await _require_node(db, node_id)

    node = await update_node_status(db, node, NodeStatus.REJECTED, rejector_id)
    await record_audit(db, AuditAction.REJECTION, rejector_id, f"Rejected {node.gxp_id}: {reason}")
    return node


async def approve_all_pending(
    db: AsyncSession, manifest_id: str, approver_id: str
) -> ApproveAllResult:
    """Best-effort bulk approval; only successes are reported."""
    approved: list[Node] = []
    for node in await get_pending_nodes(db, manifest_id):
        try:
            approved.append(await approve_node(db, node.id, approver_id))
        except TraceGateError as exc:
            logger.warning("Bulk approval skipped %s: %s", node.gxp_id, exc.message)
    logger.info("Bulk approval on %s: %d approved", manifest_id, len(approved))
    return ApproveAllResult(
        approved=len(approved),
        nodes=[NodeOut.model_validate(n) for n in approved],
    )


def summarize_nodes(nodes: list[Node]) -> ApprovalStatus:
    pending = [n for n in nodes if n.status == NodeStatus.PENDING.value]
    approved = [n for n in nodes if n.status == NodeStatus.APPROVED.value]
    rejected = [n for n in nodes if n.status == NodeStatus.REJECTED.value]
    return ApprovalStatus(
        total=len(nodes),
        approved=len(approved),
        pending=len(pending),
        rejected=len(rejected),
        pending_nodes=[NodeOut.model_validate(n) for n in pending],
        is_fully_approved=not pending and not rejected and len(nodes) > 0,
    )


async def approval_status(db: AsyncSession, manifest_id: str) -> ApprovalStatus:
    """Aggregate approval counts for one manifest."""
    return summarize_nodes(await get_nodes_by_manifest(db, manifest_id))
