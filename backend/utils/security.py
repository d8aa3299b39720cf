import hmac
from typing import Optional

from fastapi import Header, HTTPException, status

from config.env import ADMIN_API_KEY


async def require_admin_key(
    x_admin_key: Optional[str] = Header(None),
):
    if not ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Admin key not configured",
        )

    if not x_admin_key or not hmac.compare_digest(x_admin_key.encode("utf-8"), ADMIN_API_KEY.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin key",
        )

    return {"actor_id": "admin", "actor_role": "admin"}
