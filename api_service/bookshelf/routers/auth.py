"""Auth routes — sign-up, sign-in, token refresh, sign-out, session."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.auth.dependencies import SessionContext, get_session
from bookshelf.auth.jwt_handler import TokenKind, issue_token_pair, token_subject
from bookshelf.auth.password import hash_password, verify_password
from bookshelf.database import get_db
from bookshelf.errors import ConflictError
from bookshelf.models.profile import Profile
from bookshelf.models.user import User
from bookshelf.schemas.user import (
    SessionResponse,
    TokenRefresh,
    TokenResponse,
    UserLogin,
    UserRegister,
)
from bookshelf.services.catalog import profile_name

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["Authentication"])


async def find_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


def _issue_tokens(user: User) -> TokenResponse:
    access_token, refresh_token = issue_token_pair(user.id)
    return TokenResponse(access_token=access_token, refresh_token=refresh_token)


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(data: UserRegister, db: AsyncSession = Depends(get_db)):
    """Create an account and its profile, and sign the new user in."""
    if await find_user_by_email(db, data.email):
        raise ConflictError("Email already registered")

    user = User(email=data.email, hashed_password=hash_password(data.password))
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        # Another sign-up claimed the email between the lookup and the insert
        raise ConflictError("Email already registered")

    db.add(Profile(id=user.id, name=data.name))
    await db.flush()

    logger.info("user_registered", user_id=user.id)
    return _issue_tokens(user)


@router.post("/login", response_model=TokenResponse)
async def login(data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate user and return JWT tokens."""
    user = await find_user_by_email(db, data.email)

    if not user or not verify_password(data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")

    logger.info("user_login", user_id=user.id)
    return _issue_tokens(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_tokens(data: TokenRefresh, db: AsyncSession = Depends(get_db)):
    """Exchange a valid refresh token for a new access/refresh pair.

    Tokens are stateless, so the old refresh token stays valid until it expires.
    """
    user_id = token_subject(data.refresh_token, TokenKind.REFRESH)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")

    return _issue_tokens(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(session: SessionContext = Depends(get_session)):
    """Sign out. Tokens are stateless; the client drops them."""
    logger.info("user_logout", user_id=session.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/session", response_model=SessionResponse)
async def current_session(
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """Who is signed in."""
    name = await profile_name(db, session.user_id)
    return SessionResponse(user_id=session.user_id, email=session.email, name=name or "")
