"""Authentication against the external identity provider's JWTs.

The provider issues and signs access tokens; this service only verifies them
and keeps a local ``users`` row per subject so roles can be attached.
"""

from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

import jwt
import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roome.config import get_settings
from roome.database import DbSession
from roome.exceptions import AuthenticationError, AuthorizationError
from roome.models.user import User, UserRole

logger = structlog.get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

BearerCredentials = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify a provider-issued token and return its claims."""
    settings = get_settings()
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            audience=settings.auth_jwt_audience,
        )
    except jwt.PyJWTError as e:
        raise AuthenticationError("Invalid or expired token") from e

    if not claims.get("sub"):
        raise AuthenticationError("Token has no subject")
    return claims


def _initial_role(claims: dict[str, Any]) -> str:
    role = (claims.get("app_metadata") or {}).get("role")
    if role in {r.value for r in UserRole}:
        return str(role)
    return UserRole.GUEST.value


async def get_or_create_user(db: AsyncSession, claims: dict[str, Any]) -> User:
    """Get the local user for a token subject, creating it on first sight."""
    result = await db.execute(select(User).where(User.auth_id == claims["sub"]))
    user = result.scalar_one_or_none()
    now = datetime.now(UTC)

    if user is None:
        metadata = claims.get("user_metadata") or {}
        user = User(
            auth_id=claims["sub"],
            email=claims.get("email"),
            first_name=metadata.get("first_name"),
            last_name=metadata.get("last_name"),
            role=_initial_role(claims),
            last_sign_in_at=now,
        )
        db.add(user)
        await db.flush()
        logger.info("user_created", user_id=str(user.id), role=user.role)
    else:
        user.last_sign_in_at = now
        await db.flush()

    return user


async def get_current_user_optional(
    db: DbSession,
    credentials: BearerCredentials,
) -> User | None:
    """Current user if a valid bearer token is present, None otherwise."""
    if credentials is None:
        return None
    try:
        claims = decode_access_token(credentials.credentials)
    except AuthenticationError:
        logger.debug("ignoring_invalid_token")
        return None
    return await get_or_create_user(db, claims)


async def get_current_user(
    db: DbSession,
    credentials: BearerCredentials,
) -> User:
    if credentials is None:
        raise AuthenticationError()
    claims = decode_access_token(credentials.credentials)
    return await get_or_create_user(db, claims)


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_current_user_optional)]


async def require_admin(user: CurrentUser) -> User:
    """Only admins may manage components or read their analytics."""
    if not user.is_admin:
        logger.warning("admin_access_denied", user_id=str(user.id), role=user.role)
        raise AuthorizationError()
    return user


AdminUser = Annotated[User, Depends(require_admin)]


def create_access_token(
    subject: str,
    *,
    email: str | None = None,
    role: str | None = None,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Mint a token shaped like the provider's. Used by tests and local tooling."""
    settings = get_settings()
    payload: dict[str, Any] = {
        "sub": subject,
        "aud": settings.auth_jwt_audience,
        "exp": datetime.now(UTC) + expires_in,
    }
    if email:
        payload["email"] = email
    if role:
        payload["app_metadata"] = {"role": role}
    return jwt.encode(payload, settings.auth_jwt_secret, algorithm=settings.auth_jwt_algorithm)
