"""
FastAPI dependencies for the auth session.

Views never read a global "current user": they declare a `SessionContext`
parameter and receive the caller's identity (or None for anonymous browsing).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.auth.jwt_handler import TokenKind, token_subject
from bookshelf.database import get_db
from bookshelf.models.user import User

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class SessionContext:
    user_id: int
    email: str

    def owns(self, owner_id: Optional[int]) -> bool:
        return owner_id is not None and owner_id == self.user_id


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_optional_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Optional[SessionContext]:
    """Resolve the bearer token to a session; None when no token was sent."""
    if credentials is None:
        return None

    user_id = token_subject(credentials.credentials, TokenKind.ACCESS)
    if user_id is None:
        raise _unauthorized("Invalid or expired access token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise _unauthorized("User not found or inactive")

    return SessionContext(user_id=user.id, email=user.email)


async def get_session(
    session: Optional[SessionContext] = Depends(get_optional_session),
) -> SessionContext:
    """Require a signed-in caller."""
    if session is None:
        raise _unauthorized("Authentication required")
    return session
