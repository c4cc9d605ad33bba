from fastapi import Header, HTTPException

from hotelhub.core.config import settings
from hotelhub.core.security import secrets_match


async def require_internal_admin(
    internal_key: str | None = Header(default=None, alias="X-Internal-Admin-Key"),
) -> None:
    """Operator-only routes (account provisioning) carry the deployment's internal key."""
    if not secrets_match(internal_key, settings.internal_admin_key):
        raise HTTPException(status_code=403, detail="Internal admin key required")
