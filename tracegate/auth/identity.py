"""Acting-user identification for audit attribution.

No authentication is performed; the ``X-User-Id`` header only names who is
acting so that audit entries can be attributed.
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import APIKeyHeader

USER_ID_HEADER = APIKeyHeader(name="X-User-Id", auto_error=False)


async def get_header_user(user_id: str | None = Depends(USER_ID_HEADER)) -> str | None:
    """User named by the X-User-Id header, if any."""
    if user_id and user_id.strip():
        return user_id.strip()
    return None


def resolve_user(body_user: str | None, header_user: str | None, default: str) -> str:
    """Body field wins over header, header over the configured default."""
    return body_user or header_user or default


# Type alias for dependency injection
HeaderUserDep = Annotated[str | None, Depends(get_header_user)]
