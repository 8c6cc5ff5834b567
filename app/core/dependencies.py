import logging
import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from app.core.config import Config

logger = logging.getLogger(__name__)


def require_admin(x_admin_key: Optional[str] = Header(None)) -> None:
    """
    Dependency guarding admin-only operations.
    Usage: Depends(require_admin)
    The caller must send the configured ADMIN_API_KEY in the X-Admin-Key header.
    """
    if not Config.ADMIN_API_KEY:
        logger.warning("Admin request rejected: ADMIN_API_KEY is not configured")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "AdminAccessDisabled",
                "message": "Admin access is not configured on this server",
                "type": "forbidden"
            }
        )

    if not x_admin_key or not secrets.compare_digest(x_admin_key, Config.ADMIN_API_KEY):
        logger.warning("Admin request rejected: invalid admin key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "Unauthorized",
                "message": "Access denied. Admin privileges are required",
                "type": "forbidden"
            }
        )
