"""Health and dashboard endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.database import get_db
from tracegate.engine.approval import approval_status
from tracegate.schemas.nodes import ManifestOut
from tracegate.storage.repositories import get_latest_manifest
from tracegate.utils.clock import now_iso

router = APIRouter()


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "tracegate", "timestamp": now_iso()}


@router.get("/v1/dashboard")
async def dashboard(db: Annotated[AsyncSession, Depends(get_db)]):
    """Approval counts for the current manifest."""
    manifest = await get_latest_manifest(db)
    if not manifest:
        return {
            "has_data": False,
            "stats": {"total": 0, "approved": 0, "pending": 0, "rejected": 0},
            "manifest": None,
        }
    status = await approval_status(db, manifest.id)
    return {
        "has_data": True,
        "stats": status.model_dump(include={"total", "approved", "pending", "rejected"}),
        "manifest": ManifestOut.model_validate(manifest).model_dump(),
    }
