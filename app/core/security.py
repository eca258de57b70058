"""Supabase Auth integration: access-token verification and sign-out.

The auth provider owns accounts and sessions. This service only checks that a bearer token
was issued by the project (HS256, signed with the project's JWT secret) and forwards
sign-out requests.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

import httpx
import jwt
from fastapi import Depends, Header, HTTPException

from app.core.config import Settings, get_settings
from app.core.exceptions import NotAuthenticatedError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


@dataclass(frozen=True)
class AuthUser:
    id: uuid.UUID
    email: str | None = None


def _bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise NotAuthenticatedError("Missing bearer token")
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise NotAuthenticatedError("Missing bearer token")
    return token


def get_user(token: str, settings: Settings) -> AuthUser:
    """Verify an access token and return the user it belongs to."""
    if not settings.supabase_jwt_secret:
        logger.error("SUPABASE_JWT_SECRET is not configured; rejecting all tokens")
        raise NotAuthenticatedError("Authentication not configured")
    try:
        payload = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=[JWT_ALGORITHM],
            audience=settings.supabase_jwt_audience,
        )
    except jwt.ExpiredSignatureError:
        raise NotAuthenticatedError("Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid access token: {e}")
        raise NotAuthenticatedError("Invalid token")

    sub = payload.get("sub")
    try:
        user_id = uuid.UUID(str(sub))
    except ValueError:
        raise NotAuthenticatedError("Token missing user ID")
    return AuthUser(id=user_id, email=payload.get("email"))


async def sign_out(token: str, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
    """Revoke the session's refresh tokens at the auth provider."""
    url = f"{settings.supabase_url.rstrip('/')}/auth/v1/logout"
    headers = {"apikey": settings.supabase_anon_key, "Authorization": f"Bearer {token}"}
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=10.0)
    try:
        response = await client.post(url, headers=headers)
    except httpx.HTTPError as e:
        logger.exception("Sign-out request failed")
        raise HTTPException(status_code=502, detail=f"Sign-out failed: {e}")
    finally:
        if owns_client:
            await client.aclose()
    if response.is_error:
        logger.warning(f"Sign-out rejected by auth provider: {response.status_code}")
        raise HTTPException(status_code=502, detail="Sign-out failed")


async def get_access_token(authorization: str | None = Header(None)) -> str:
    return _bearer_token(authorization)


async def get_current_user(
    token: str = Depends(get_access_token),
    settings: Settings = Depends(get_settings),
) -> AuthUser:
    """Dependency: the signed-in user, or NotAuthenticatedError (rendered as 401 + login_url)."""
    return get_user(token, settings)
