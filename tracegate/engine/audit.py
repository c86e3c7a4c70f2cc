"""Append-only audit log with independently hashed entries."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.config import settings
from tracegate.models import AuditEntry
from tracegate.schemas.enums import AuditAction
from tracegate.storage.repositories import create_audit_entry, get_audit_entries
from tracegate.utils.canonical import sha256_digest
from tracegate.utils.clock import now_iso

logger = logging.getLogger(__name__)


def compute_payload_hash(
    action: str, user_id: str | None, details: str | None, timestamp: str
) -> str:
    """Hash of the entry's descriptive payload. Not chained to earlier entries."""
    return sha256_digest(
        {"action": action, "user_id": user_id, "details": details, "timestamp": timestamp}
    )


async def record_audit(
    db: AsyncSession,
    action: AuditAction,
    user_id: str | None,
    details: str | None = None,
) -> AuditEntry:
    """Append one audit entry for a mutating action."""
    timestamp = now_iso()
    action_value = AuditAction(action).value
    entry = await create_audit_entry(
        db,
        timestamp=timestamp,
        action=action_value,
        user_id=user_id,
        details=details,
        payload_hash=compute_payload_hash(action_value, user_id, details, timestamp),
    )
    logger.info("[AUDIT] %s by %s: %s", action_value, user_id, details)
    return entry


def clamp_limit(limit: int | None) -> int:
    """Requested page size clamped to [1, audit_max_limit]."""
    if limit is None or limit <= 0:
        limit = settings.audit_default_limit
    return min(limit, settings.audit_max_limit)


async def list_audit_entries(db: AsyncSession, limit: int | None = None) -> list[AuditEntry]:
    """Most recent entries, newest first, never more than audit_max_limit."""
    return await get_audit_entries(db, clamp_limit(limit))
