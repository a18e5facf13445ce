import hmac
import logging
from typing import Optional

from fastapi import Header

from holdaspot.core.config import settings
from holdaspot.core.exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)


def check_bearer_secret(authorization: Optional[str], secret: str, name: str) -> None:
    """Compare an Authorization header against a configured shared secret"""
    if not secret:
        logger.error(f"{name} not configured")
        raise ConfigurationError("Server configuration error")

    expected = f"Bearer {secret}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        raise AuthenticationError("Unauthorized")


async def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    check_bearer_secret(authorization, settings.CRON_SECRET, "CRON_SECRET")


async def verify_admin_secret(authorization: Optional[str] = Header(None)) -> None:
    check_bearer_secret(authorization, settings.ADMIN_SECRET, "ADMIN_SECRET")
