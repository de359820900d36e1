"""
Identity dependency.

Authentication and sessions are handled by the gateway in front of this
service. The gateway forwards the authenticated user's id in the
X-User-Id header; every per-user endpoint depends on get_current_user_id.
"""
from typing import Optional

from fastapi import Header

from core.exceptions import UnauthorizedError


def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
) -> str:
    """
    Return the caller's user id.

    Raises UnauthorizedError (401) if the header is missing or blank.
    """
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedError("Not authenticated")
    return x_user_id.strip()
