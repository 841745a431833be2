"""
Request user resolution for Auth0 JWTs and development mode.

Form actions report a missing user in their response body instead of with an
HTTP error, so the dependency here yields None rather than raising when no
user can be resolved.
"""
import logging

import httpx
import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from db.session import get_async_session
from models.user import User

logger = logging.getLogger(__name__)


# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)

# Cache for JWKS client (reuse across requests)
_jwks_clients: dict[str, PyJWKClient] = {}

DEV_AUTH0_ID = "dev|local-development-user"


def get_jwks_client(settings: Settings) -> PyJWKClient:
    """Get or create a cached JWKS client for the given settings."""
    if settings.auth0_jwks_url not in _jwks_clients:
        _jwks_clients[settings.auth0_jwks_url] = PyJWKClient(
            settings.auth0_jwks_url,
            cache_jwk_set=True,
            lifespan=3600,  # Cache keys for 1 hour
        )
    return _jwks_clients[settings.auth0_jwks_url]


def decode_jwt(token: str, settings: Settings) -> dict | None:
    """
    Decode and validate a JWT token from Auth0.

    Returns:
        The token claims, or None if the token is invalid, expired, or the
        signing keys could not be fetched.
    """
    try:
        jwks_client = get_jwks_client(settings)
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.auth0_audience,
            issuer=settings.auth0_issuer,
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        return None
    except jwt.PyJWTError as e:
        # Log full details for debugging (server-side only)
        logger.warning("JWT validation failed: %s", e, exc_info=True)
        return None
    except httpx.HTTPError as e:
        logger.error("Failed to fetch JWKS from Auth0: %s", e, exc_info=True)
        return None


async def get_or_create_user(
    db: AsyncSession,
    auth0_id: str,
    email: str | None = None,
) -> User:
    """
    Get existing user or create new one from Auth0 claims.

    Handles race conditions where multiple concurrent requests may try to create
    the same user simultaneously. If an IntegrityError occurs (due to unique
    constraint on auth0_id), the function rolls back and fetches the existing user.

    Note: Uses flush(), not commit. Session generator handles commit at request end.
    This runs before any other database work in the request, so the rollback
    has nothing else to undo.
    """
    result = await db.execute(select(User).where(User.auth0_id == auth0_id))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(auth0_id=auth0_id, email=email)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Race condition: another request created the user between our SELECT
            # and INSERT. Rollback and fetch the existing user.
            await db.rollback()
            result = await db.execute(select(User).where(User.auth0_id == auth0_id))
            user = result.scalar_one()

    # Update email if changed in Auth0
    if email and user.email != email:
        user.email = email
        await db.flush()

    return user


async def get_or_create_dev_user(db: AsyncSession) -> User:
    """Get or create a development user for DEV_MODE."""
    return await get_or_create_user(db, auth0_id=DEV_AUTH0_ID, email="dev@localhost")


async def resolve_user(
    credentials: HTTPAuthorizationCredentials | None,
    db: AsyncSession,
    settings: Settings,
) -> User | None:
    """
    Resolve the user behind a request.

    In DEV_MODE, bypasses auth and returns a test user. Otherwise the bearer
    token must be a valid Auth0 JWT with a `sub` claim.
    """
    if settings.dev_mode:
        return await get_or_create_dev_user(db)

    if credentials is None:
        return None

    payload = decode_jwt(credentials.credentials, settings)
    if payload is None:
        return None

    auth0_id = payload.get("sub")
    if not auth0_id:
        logger.warning("Rejected token without sub claim")
        return None

    return await get_or_create_user(db, auth0_id=auth0_id, email=payload.get("email"))


async def get_request_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> User | None:
    """
    Dependency returning the current user, or None for anonymous requests.

    The user is also kept on `request.state.user` for the rest of the request.
    """
    user = await resolve_user(credentials, db, settings)
    request.state.user = user
    return user
