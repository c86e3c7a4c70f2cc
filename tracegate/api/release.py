"""Release readiness endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.database import get_db
from tracegate.engine.readiness import check_release_readiness
from tracegate.schemas.release import ReleaseReadiness

router = APIRouter()


@router.get("/readiness/{sha}", response_model=ReleaseReadiness)
async def readiness(
    sha: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    expected_hash: Annotated[str | None, Query()] = None,
):
    """
    Check release readiness for a commit.
    Issues a Release Readiness Token when every condition passes.
    """
    return await check_release_readiness(db, sha, expected_hash=expected_hash)
