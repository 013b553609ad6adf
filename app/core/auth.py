"""Hosted-platform JWT authentication for FastAPI.

The auth platform signs access tokens with a shared HS256 secret. Sign-up,
OTP verification and password flows live on the platform; this module only
verifies the token and resolves the caller's profile.
"""

import uuid
from dataclasses import dataclass

import jwt as pyjwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select

from app.core.config import get_settings
from app.db.base import get_session_factory
from app.db.models.profile import Profile

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthUser:
    """Authenticated user extracted from a platform JWT."""

    user_id: str
    claims: dict


def decode_access_token(token: str) -> AuthUser:
    """Verify and decode a platform access token.

    Raises ``HTTPException(401)`` on any validation failure.
    """
    settings = get_settings()
    if not settings.auth_jwt_secret:
        raise HTTPException(status_code=500, detail="Authentication is misconfigured")

    try:
        payload = pyjwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=settings.auth_jwt_algorithms,
            audience=settings.auth_jwt_audience,
            options={"require": ["sub", "exp"]},
        )
    except pyjwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except pyjwt.InvalidAudienceError:
        raise HTTPException(status_code=401, detail="Unauthorized audience (aud mismatch)")
    except pyjwt.MissingRequiredClaimError as exc:
        raise HTTPException(status_code=401, detail=f"Missing required claim: {exc}")
    except pyjwt.InvalidTokenError as exc:
        raise HTTPException(status_code=401, detail=f"Invalid token: {exc}")

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Token missing sub claim")

    return AuthUser(user_id=sub, claims=payload)


async def require_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> AuthUser:
    """FastAPI dependency that extracts and validates the bearer token.

    Usage::

        @router.get("/protected")
        async def protected(user: AuthUser = Depends(require_auth)):
            ...
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    return decode_access_token(credentials.credentials)


@dataclass(frozen=True)
class CurrentProfile:
    """Caller identity plus the organization every query is scoped to."""

    user_id: uuid.UUID
    organization_id: uuid.UUID
    role: str


async def get_current_profile(user: AuthUser = Depends(require_auth)) -> CurrentProfile:
    """Resolve the caller's profile and organization.

    Raises ``HTTPException(400)`` when the user has not joined an organization.
    """
    try:
        user_uuid = uuid.UUID(user.user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Token sub is not a user id")

    async with get_session_factory()() as session:
        result = await session.execute(select(Profile).where(Profile.id == user_uuid))
        profile = result.scalar_one_or_none()

    if profile is None or profile.organization_id is None:
        raise HTTPException(status_code=400, detail="User not associated with organization")

    return CurrentProfile(
        user_id=profile.id,
        organization_id=profile.organization_id,
        role=profile.role,
    )
