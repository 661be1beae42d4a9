"""
Authentication routes — register, login, logout, me.

Route prefix: {API_PREFIX}/auth
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import db_session, get_settings, get_token_service
from api.errors import Conflict, NotFoundOrForbidden, Unauthenticated, ValidationFailed, envelope
from auth.dependencies import get_current_user
from auth.jwt import TokenClaims, TokenService
from auth.password import hash_password_async, verify_password_async
from config.settings import Settings
from database.users import DuplicateEmail, create_user, get_user_by_email, get_user_by_id
from utils.schemas import LoginRequest, RegisterRequest, UserOut, dump

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

INVALID_CREDENTIALS = "Invalid email or password"
DUPLICATE_EMAIL = "User with this email already exists"


def _set_auth_cookie(response: Response, settings: Settings, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.cookie_max_age,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def _clear_auth_cookie(response: Response, settings: Settings) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


@router.post("/register")
async def register(
    req: RegisterRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Register a new user."""
    password_hash = await hash_password_async(req.password, settings.bcrypt_rounds)
    try:
        user = await create_user(
            session,
            name=req.name,
            email=req.email,
            password_hash=password_hash,
        )
    except DuplicateEmail:
        raise Conflict(DUPLICATE_EMAIL) from None
    logger.info("Registered user %s", user.id)
    return envelope(dump(UserOut.model_validate(user)), message="User registered successfully")


@router.post("/login")
async def login(
    req: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(get_settings),
    tokens: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    if not req.email or not req.password:
        raise ValidationFailed(message="Email and password are required")

    user = await get_user_by_email(session, req.email)
    # unknown email and wrong password share one response
    if user is None or not await verify_password_async(req.password, user.password_hash):
        logger.info("Failed login attempt")
        raise Unauthenticated(INVALID_CREDENTIALS)

    token = tokens.issue(str(user.id), user.email)
    _set_auth_cookie(response, settings, token)
    logger.info("Login: %s", user.id)

    return envelope(
        {"user": dump(UserOut.model_validate(user)), "token": token},
        message="Login successful",
    )


@router.post("/logout")
async def logout(
    response: Response,
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Clear the auth cookie.  Tokens stay valid until they expire."""
    _clear_auth_cookie(response, settings)
    return envelope(message="Logged out successfully")


@router.get("/me")
async def me(
    claims: TokenClaims = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    user = await get_user_by_id(session, claims.user_id)
    if user is None:
        raise NotFoundOrForbidden("User not found")
    return envelope(dump(UserOut.model_validate(user)))
