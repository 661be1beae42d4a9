"""
FastAPI dependencies for authentication.

Provides ``resolve_caller`` (token → claims, or ``None``) and the
``get_current_user`` dependency that every protected route uses.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from fastapi import Request

from api.errors import Unauthenticated
from auth.jwt import TokenClaims, TokenError, TokenService

logger = logging.getLogger(__name__)

AUTH_COOKIE_NAME = "auth-token"
_BEARER_PREFIX = "Bearer "


def extract_token(
    authorization: Optional[str],
    cookies: Mapping[str, str],
    cookie_name: str = AUTH_COOKIE_NAME,
) -> Optional[str]:
    """
    Find the bearer token: ``Authorization: Bearer <token>`` first, then the
    auth cookie.  Returns ``None`` when neither carries one.
    """
    if authorization and authorization.startswith(_BEARER_PREFIX):
        token = authorization[len(_BEARER_PREFIX):].strip()
        if token:
            return token
    return cookies.get(cookie_name) or None


def resolve_caller(request: Request) -> Optional[TokenClaims]:
    """Return the verified caller claims, or ``None`` for anonymous/invalid."""
    cookie_name = request.app.state.settings.auth_cookie_name
    token = extract_token(
        request.headers.get("authorization"),
        request.cookies,
        cookie_name,
    )
    if token is None:
        return None

    tokens: TokenService = request.app.state.tokens
    try:
        return tokens.verify(token)
    except TokenError as exc:
        logger.info("Rejected token on %s: %s", request.url.path, type(exc).__name__)
        return None


async def get_current_user(request: Request) -> TokenClaims:
    """
    Extract and verify the caller's token, returning its claims.

    Missing, malformed, forged and expired tokens all raise the same 401.
    """
    claims = resolve_caller(request)
    if claims is None:
        raise Unauthenticated()
    return claims
