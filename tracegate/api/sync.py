"""Manifest sync endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.auth.identity import HeaderUserDep
from tracegate.config import settings
from tracegate.database import get_db
from tracegate.engine.sync import get_current_manifest, sync_manifest
from tracegate.schemas.nodes import ManifestGraph
from tracegate.schemas.sync import SyncRequest

router = APIRouter()


@router.post("/manifest", status_code=status.HTTP_201_CREATED)
async def post_manifest(
    body: SyncRequest,
    header_user: HeaderUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Sync a manifest built from the repository."""
    result = await sync_manifest(db, body, header_user or settings.ci_user_id)
    return {"success": True, **result.model_dump()}


@router.get("/current", response_model=ManifestGraph)
async def current_manifest(db: Annotated[AsyncSession, Depends(get_db)]):
    """Current manifest with its graph."""
    data = await get_current_manifest(db)
    if data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No manifest found")
    return data
