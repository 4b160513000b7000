"""
Authentication against Auth0-issued bearer tokens.

Promptu has no login of its own. Auth0 signs an RS256 JWT; the ``sub`` claim
identifies the account and the first request with a new ``sub`` creates the
user row. Profile fields chosen in Promptu (username, bio, website) are never
overwritten from claims.
"""
import logging
from dataclasses import dataclass
from functools import lru_cache

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from db.session import get_async_session
from models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

DEV_CLAIMS_SUB = "dev|local-development-user"

_CLAIM_ERRORS: dict[type[jwt.PyJWTError], str] = {
    jwt.ExpiredSignatureError: "Token has expired",
    jwt.InvalidAudienceError: "Invalid audience",
    jwt.InvalidIssuerError: "Invalid issuer",
}


@dataclass(frozen=True)
class IdentityClaims:
    """The token claims Promptu copies onto a user row."""

    sub: str
    email: str | None = None
    name: str | None = None
    picture: str | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "IdentityClaims":
        sub = payload.get("sub")
        if not sub:
            raise _unauthorized("Invalid token: missing sub claim")
        return cls(
            sub=sub,
            email=payload.get("email"),
            name=payload.get("name"),
            picture=payload.get("picture"),
        )


DEV_CLAIMS = IdentityClaims(sub=DEV_CLAIMS_SUB, email="dev@localhost", name="Local Developer")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@lru_cache(maxsize=4)
def get_jwks_client(jwks_url: str) -> PyJWKClient:
    """JWKS client per tenant URL; signing keys are cached for an hour."""
    return PyJWKClient(jwks_url, cache_jwk_set=True, lifespan=3600)


def decode_token(token: str, settings: Settings) -> IdentityClaims:
    """
    Verify a bearer token and extract identity claims.

    Raises:
        HTTPException: 401 for invalid tokens, 503 when Auth0's key set is unreachable.
    """
    try:
        signing_key = get_jwks_client(settings.auth0_jwks_url).get_signing_key_from_jwt(token)
        payload = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.auth0_audience,
            issuer=settings.auth0_issuer,
        )
    except jwt.PyJWKClientConnectionError as e:
        logger.error("jwks_fetch_failed", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not validate credentials",
        ) from e
    except jwt.PyJWTError as e:
        detail = _CLAIM_ERRORS.get(type(e), "Invalid token")
        logger.info("token_rejected", extra={"reason": detail})
        raise _unauthorized(detail) from e
    return IdentityClaims.from_payload(payload)


async def _find_user(db: AsyncSession, sub: str) -> User | None:
    return await db.scalar(select(User).where(User.auth0_id == sub))


async def get_or_create_user(db: AsyncSession, claims: IdentityClaims) -> User:
    """
    Load the user for ``claims.sub``, creating the row on first sight.

    Two first requests can race to insert the same ``sub``; the loser rolls
    back and reads the winner's row. Authentication runs before any other
    database work in the request, so the rollback discards nothing else.
    """
    user = await _find_user(db, claims.sub)
    if user is None:
        user = User(
            auth0_id=claims.sub,
            email=claims.email,
            name=claims.name,
            image=claims.picture,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            user = await _find_user(db, claims.sub)
            if user is None:
                raise
        else:
            logger.info("user_created", extra={"user_id": str(user.id)})
            return user

    changed = False
    if claims.email and user.email != claims.email:
        user.email = claims.email
        changed = True
    if claims.picture and not user.image:
        user.image = claims.picture
        changed = True
    if changed:
        await db.flush()
    return user


async def get_or_create_dev_user(db: AsyncSession) -> User:
    """The fixed local user that every DEV_MODE request acts as."""
    return await get_or_create_user(db, DEV_CLAIMS)


async def _resolve_user(
    credentials: HTTPAuthorizationCredentials | None,
    db: AsyncSession,
    settings: Settings,
) -> User | None:
    if settings.dev_mode:
        return await get_or_create_dev_user(db)
    if credentials is None:
        return None
    claims = decode_token(credentials.credentials, settings)
    return await get_or_create_user(db, claims)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> User:
    """
    Dependency for endpoints that require a signed-in user.

    Raises:
        HTTPException: 401 when no valid bearer token is present.
    """
    user = await _resolve_user(credentials, db, settings)
    if user is None:
        raise _unauthorized("Authentication required")
    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> User | None:
    """
    Dependency for endpoints open to anonymous callers.

    A missing token means anonymous; a token that is sent but invalid is still
    rejected with 401.
    """
    return await _resolve_user(credentials, db, settings)
