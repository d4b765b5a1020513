from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Annotated, Any

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger
from passlib.context import CryptContext
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.models.member import Member
from app.utils.misc import get_utc_now

bearer_scheme = HTTPBearer(auto_error=False)

# pbkdf2_sha256 avoids passlib's bcrypt backend probing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def _signing_key() -> str:
    """The configured JWT secret, or a per-process one if none is set.

    A generated key is kept on ``settings`` so every token issued by this
    process verifies; a restart invalidates them all.
    """
    if not settings.jwt_secret:
        logger.warning("jwt_secret is not set, signing tokens with a per-process key")
        settings.jwt_secret = secrets.token_urlsafe(32)
    return settings.jwt_secret


def create_access_token(member: Member, *, session_id: int | None = None) -> str:
    """Sign an access token carrying the member id (``sub``) and admin flag."""
    issued_at = get_utc_now()
    payload: dict[str, Any] = {
        "sub": str(member.id),
        "is_admin": member.is_admin,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(seconds=settings.access_token_ttl_seconds)).timestamp()),
    }
    if session_id is not None:
        payload["sid"] = session_id
    return jwt.encode(payload, _signing_key(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry; raises ``jwt.InvalidTokenError`` subclasses."""
    return jwt.decode(token, _signing_key(), algorithms=[settings.jwt_algorithm])


def generate_refresh_token() -> str:
    return secrets.token_urlsafe(64)


def hash_token(token: str) -> str:
    """Refresh tokens are only ever stored as this digest."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def refresh_token_expiry() -> datetime:
    return get_utc_now() + timedelta(seconds=settings.refresh_token_ttl_seconds)


def _member_id_from_credentials(credentials: HTTPAuthorizationCredentials | None) -> int:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        claims = decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token") from None

    try:
        return int(claims["sub"])
    except (KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token subject") from None


async def get_current_member(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Member:
    """The member named by the bearer token.

    The admin flag is re-read from the database rather than trusted from the
    token, so promotions and demotions apply immediately.
    """
    member_id = _member_id_from_credentials(credentials)

    result = await db.exec(select(Member).where(Member.id == member_id))
    member = result.first()
    if not member:
        raise HTTPException(status_code=401, detail="Member no longer exists")
    return member


def require_admin(member: Annotated[Member, Depends(get_current_member)]) -> Member:
    if not member.is_admin:
        logger.warning(f"Member {member.id} attempted an admin-only action")
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return member
