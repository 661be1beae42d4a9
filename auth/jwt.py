"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256:
``<payload>.<hex signature>``.  The payload carries ``user_id``, ``email``,
``iat`` and ``exp``.  The secret comes from ``Settings.jwt_secret``
(env var: ``JWT_SECRET``) and is handed to ``TokenService`` once, at startup.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from dataclasses import dataclass
from typing import Callable

from config.settings import Settings


class ConfigurationError(RuntimeError):
    """Raised when the token service cannot be built from the given settings."""


class TokenError(Exception):
    """Base class for every token verification failure."""


class MalformedToken(TokenError):
    pass


class InvalidSignature(TokenError):
    pass


class ExpiredToken(TokenError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    issued_at: int
    expires_at: int


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).decode().rstrip("=")


def _b64decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return urlsafe_b64decode(data + padding)


class TokenService:
    def __init__(
        self,
        secret: str,
        expiry_seconds: int = 604800,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ConfigurationError("JWT secret is not configured")
        if expiry_seconds <= 0:
            raise ConfigurationError("Token expiry must be positive")
        self._secret = secret.encode()
        self.expiry_seconds = expiry_seconds
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(settings.jwt_secret, settings.jwt_expiry_seconds)

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret, raw, hashlib.sha256).hexdigest()

    def issue(self, user_id: str, email: str) -> str:
        """Create a signed token containing ``user_id``, ``email`` and expiry."""
        now = int(self._clock())
        payload = {
            "user_id": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + self.expiry_seconds,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return _b64encode(raw) + "." + self._sign(raw)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify ``token`` and return its claims.

        Raises ``MalformedToken``, ``InvalidSignature`` or ``ExpiredToken``.
        """
        parts = token.split(".")
        if len(parts) != 2 or not all(parts):
            raise MalformedToken("bad format")
        try:
            raw = _b64decode(parts[0])
        except (binascii.Error, ValueError) as exc:
            raise MalformedToken("bad encoding") from exc

        if not hmac.compare_digest(parts[1].encode(), self._sign(raw).encode()):
            raise InvalidSignature("bad signature")

        try:
            payload = json.loads(raw)
            claims = TokenClaims(
                user_id=str(payload["user_id"]),
                email=str(payload["email"]),
                issued_at=int(payload["iat"]),
                expires_at=int(payload["exp"]),
            )
        except (ValueError, TypeError, KeyError) as exc:
            raise MalformedToken("bad payload") from exc

        if claims.expires_at <= self._clock():
            raise ExpiredToken("token expired")
        return claims
