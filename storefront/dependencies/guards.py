import secrets

from fastapi import Depends, Header, HTTPException

from storefront.config import Settings
from storefront.dependencies.services import get_settings


def _matches(provided, expected: str) -> bool:
    return provided is not None and secrets.compare_digest(provided, expected)


def require_cron_secret(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
):
    """Scheduler calls carry ``Authorization: Bearer <CRON_SECRET>``; open when unset."""
    if not settings.CRON_SECRET:
        return

    if not _matches(authorization, f"Bearer {settings.CRON_SECRET}"):
        raise HTTPException(401, "Unauthorized")


def require_admin_key(
    x_admin_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
):
    if not settings.ADMIN_API_KEY:
        return

    if not _matches(x_admin_key, settings.ADMIN_API_KEY):
        raise HTTPException(403, "Admin access required")
