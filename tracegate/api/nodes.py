"""Node and approval endpoints."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.auth.identity import HeaderUserDep, resolve_user
from tracegate.config import settings
from tracegate.database import get_db
from tracegate.engine.approval import approval_status, approve_node, reject_node
from tracegate.schemas.nodes import (
    ApproveRequest,
    EdgeOut,
    NodeOut,
    RejectRequest,
)
from tracegate.storage.repositories import (
    get_edges_by_manifest,
    get_latest_manifest,
    get_node_by_id,
    get_nodes_by_manifest,
)

router = APIRouter()


async def _current_manifest_or_404(db: AsyncSession):
    manifest = await get_latest_manifest(db)
    if not manifest:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No manifest found")
    return manifest


@router.get("")
async def list_nodes(db: Annotated[AsyncSession, Depends(get_db)]):
    """All nodes and edges of the current manifest."""
    manifest = await _current_manifest_or_404(db)
    nodes = await get_nodes_by_manifest(db, manifest.id)
    edges = await get_edges_by_manifest(db, manifest.id)
    return {
        "manifest_id": manifest.id,
        "product_code": manifest.product_code,
        "version": manifest.version,
        "nodes": [NodeOut.model_validate(n).model_dump() for n in nodes],
        "edges": [EdgeOut.model_validate(e).model_dump() for e in edges],
    }


# Declared before /{node_id} so it is not shadowed
@router.get("/status/approvals")
async def get_approval_status(db: Annotated[AsyncSession, Depends(get_db)]):
    """Approval counts for the current manifest."""
    manifest = await _current_manifest_or_404(db)
    result = await approval_status(db, manifest.id)
    return {"manifest_id": manifest.id, **result.model_dump()}


@router.get("/{node_id}", response_model=NodeOut)
async def get_node(node_id: str, db: Annotated[AsyncSession, Depends(get_db)]):
    """Get a node by its record ID."""
    node = await get_node_by_id(db, node_id)
    if not node:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Node not found")
    return node


@router.post("/{node_id}/approve")
async def approve(
    node_id: str,
    header_user: HeaderUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    body: Annotated[ApproveRequest | None, Body()] = None,
):
    """Approve a node."""
    body = body or ApproveRequest()
    user_id = resolve_user(body.approved_by, header_user, settings.default_approver)
    node = await approve_node(db, node_id, user_id, body.comment)
    return {
        "success": True,
        "node": NodeOut.model_validate(node).model_dump(),
        "message": "Node approved successfully",
    }


@router.post("/{node_id}/reject")
async def reject(
    node_id: str,
    body: RejectRequest,
    header_user: HeaderUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Reject a node. A reason is required."""
    user_id = resolve_user(body.rejected_by, header_user, settings.default_approver)
    node = await reject_node(db, node_id, user_id, body.reason)
    return {
        "success": True,
        "node": NodeOut.model_validate(node).model_dump(),
        "message": "Node rejected",
    }
