"""Signed session tokens.

A sign-in yields a short-lived access token for API calls and a longer-lived
refresh token that can only be exchanged for a new pair. Both carry the user
id as ``sub`` and their kind as ``type``; nothing is stored server-side.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from bookshelf.config import get_settings


class TokenKind(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"


def _lifetime(kind: TokenKind) -> timedelta:
    settings = get_settings()
    if kind is TokenKind.ACCESS:
        return timedelta(minutes=settings.access_token_expire_minutes)
    return timedelta(days=settings.refresh_token_expire_days)


def encode_token(user_id: int, kind: TokenKind) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "type": kind.value,
        "iat": now,
        "exp": now + _lifetime(kind),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def issue_token_pair(user_id: int) -> tuple[str, str]:
    """(access, refresh) for a freshly signed-in user."""
    return encode_token(user_id, TokenKind.ACCESS), encode_token(user_id, TokenKind.REFRESH)


def token_subject(token: str, kind: TokenKind) -> Optional[int]:
    """User id of a valid, unexpired token of ``kind``; None otherwise."""
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if claims.get("type") != kind.value:
        return None
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None
