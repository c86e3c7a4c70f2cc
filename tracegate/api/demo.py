"""Demo helpers."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.auth.identity import HeaderUserDep, resolve_user
from tracegate.config import settings
from tracegate.database import get_db
from tracegate.engine.approval import approve_all_pending
from tracegate.schemas.nodes import ApproveAllRequest
from tracegate.storage.repositories import get_latest_manifest

router = APIRouter()


@router.post("/approve-all")
async def approve_all(
    header_user: HeaderUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    body: Annotated[ApproveAllRequest | None, Body()] = None,
):
    """Approve every pending node of the current manifest."""
    manifest = await get_latest_manifest(db)
    if not manifest:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No manifest found")
    body = body or ApproveAllRequest()
    user_id = resolve_user(body.approved_by, header_user, settings.default_approver)
    result = await approve_all_pending(db, manifest.id, user_id)
    return {
        "success": True,
        "approved": result.approved,
        "nodes": [n.gxp_id for n in result.nodes],
    }
