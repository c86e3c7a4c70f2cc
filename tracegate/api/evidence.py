"""Test evidence endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.auth.identity import HeaderUserDep
from tracegate.config import settings
from tracegate.database import get_db
from tracegate.engine.evidence import list_evidence, upload_evidence
from tracegate.schemas.evidence import EvidenceRequest

router = APIRouter()


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload(
    body: EvidenceRequest,
    header_user: HeaderUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Upload test execution evidence for the current manifest."""
    result = await upload_evidence(db, body, header_user or settings.ci_user_id)
    return {"success": True, **result.model_dump()}


@router.get("")
async def get_evidence(db: Annotated[AsyncSession, Depends(get_db)]):
    """Evidence for the current manifest."""
    manifest_id, evidence = await list_evidence(db)
    return {"manifest_id": manifest_id, "evidence": [e.model_dump() for e in evidence]}
