"""Audit log endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.database import get_db
from tracegate.engine.audit import list_audit_entries
from tracegate.schemas.audit import AuditEntryOut, AuditLogResponse

router = APIRouter()


@router.get("", response_model=AuditLogResponse)
async def get_audit_log(
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int | None, Query()] = None,
):
    """Most recent audit entries (at most 500)."""
    entries = await list_audit_entries(db, limit)
    return AuditLogResponse(
        entries=[AuditEntryOut.model_validate(e) for e in entries],
        count=len(entries),
    )
