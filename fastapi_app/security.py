import logging
import os
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import api_config

logger = logging.getLogger(__name__)

# Security scheme; missing credentials are answered with our own 401 body
security = HTTPBearer(auto_error=False)


def get_api_key() -> Optional[str]:
    """Read the expected API key from the environment at request time"""
    env_name = api_config.get("security.api_key_env", "SPRITEGEN_API_KEY")
    return os.getenv(env_name) or None


def unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "error": "Unauthorized",
            "message": "Valid API key required. Use Authorization: Bearer <key>",
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_api_key(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Validate the Bearer token against the configured API key"""
    expected = get_api_key()
    if expected is None:
        logger.error("[security] No API key configured; rejecting request")
        raise unauthorized()

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise unauthorized()

    if credentials.credentials != expected:
        token_preview = (
            credentials.credentials[:8] + "..."
            if len(credentials.credentials) > 8
            else "[SHORT]"
        )
        logger.warning(f"[security] Invalid token attempt: {token_preview}")
        raise unauthorized()

    return "client"
