"""Admin access check"""

from typing import Optional
import secrets

from fastapi import Header

from .config import settings
from .exceptions import ForbiddenException

async def require_admin_key(
    x_admin_key: Optional[str] = Header(None, alias="X-Admin-Key")
) -> None:
    """
    Guard for admin routes

    Open when ADMIN_API_KEY is unset, otherwise the X-Admin-Key header must match.
    """
    expected = settings.ADMIN_API_KEY
    if not expected:
        return

    if not x_admin_key or not secrets.compare_digest(x_admin_key, expected):
        raise ForbiddenException("Admin key missing or invalid", error_code="ADMIN_KEY_INVALID")
