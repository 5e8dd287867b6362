"""JWT issuing and validation for FastAPI."""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from web.errors import ConfigurationError, NotAuthenticatedError

ALGORITHM = "HS256"
TOKEN_TTL = timedelta(days=7)

security = HTTPBearer(auto_error=False)


def _get_jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise ConfigurationError("JWT_SECRET not configured")
    return secret


def create_access_token(user_id: str, github_id: int, login: str, ttl: timedelta = TOKEN_TTL) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "github_id": github_id,
        "login": login,
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(payload, _get_jwt_secret(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Return the user claims; raises NotAuthenticatedError on any JWT problem."""
    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[ALGORITHM])
    except JWTError:
        raise NotAuthenticatedError("Invalid or expired token")
    user_id = payload.get("sub")
    if not user_id:
        raise NotAuthenticatedError("Invalid token: missing sub")
    return {
        "id": user_id,
        "github_id": payload.get("github_id"),
        "login": payload.get("login"),
    }


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    if credentials is None or not credentials.credentials:
        raise NotAuthenticatedError("Access token required")
    return decode_access_token(credentials.credentials)
