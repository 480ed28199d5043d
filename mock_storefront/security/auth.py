"""
Bearer Token Authentication

Stands in for the external auth service: issues HS256 access tokens and
resolves the shopper from the Authorization header.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import HTTPException, Request

from ..config import settings

logger = logging.getLogger(__name__)


def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    """Issue an access token for a shopper"""
    minutes = settings.access_token_expire_minutes if expires_minutes is None else expires_minutes
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """
    Resolve the shopper id from a token.

    Raises:
        jwt.InvalidTokenError: Token is malformed, expired or badly signed
    """
    claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    user_id = claims.get("sub")
    if not user_id:
        raise jwt.InvalidTokenError("Token has no subject")
    return user_id


class AuthDependency:
    """
    FastAPI dependency resolving the authenticated shopper.

    Returns the shopper id, or None for anonymous requests when auth is
    optional.
    """

    def __init__(self, require_auth: bool = True):
        self.require_auth = require_auth

    async def __call__(self, request: Request) -> Optional[str]:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")

        if scheme.lower() != "bearer" or not token:
            if self.require_auth:
                raise HTTPException(status_code=401, detail="Not authenticated")
            return None

        try:
            return decode_access_token(token)
        except jwt.ExpiredSignatureError:
            if self.require_auth:
                raise HTTPException(status_code=401, detail="Token expired")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected access token: {e}")
            if self.require_auth:
                raise HTTPException(status_code=401, detail="Invalid token")
        return None


# Dependency instances
require_user = AuthDependency(require_auth=True)
optional_user = AuthDependency(require_auth=False)
