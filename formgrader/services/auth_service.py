"""
Token issuing/verification and password hashing.

Tokens are HS256 JWTs shaped ``{"user": {"id": ..., "isMaster": ...}, "iat",
"exp"}`` so existing clients that decode the payload keep working.  Every
verification failure (bad encoding, bad signature, expiry, missing claims)
is reported as the same ``InvalidToken``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from ..config import Settings
from ..errors import InvalidToken

logger = logging.getLogger(__name__)

# bcrypt only considers the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 10) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash or not isinstance(password, str):
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


@dataclass(frozen=True)
class AuthClaims:
    """Verified identity carried by a session token."""

    user_id: str
    is_master: bool = False


class TokenService:
    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        expires_in: timedelta = timedelta(hours=1),
    ) -> None:
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_in = expires_in

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_in=timedelta(seconds=settings.token_expires_seconds),
        )

    def issue(self, claims: AuthClaims, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "user": {"id": claims.user_id, "isMaster": bool(claims.is_master)},
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expires_in).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> AuthClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.PyJWTError as exc:
            logger.debug(f"Token rejected: {type(exc).__name__}")
            raise InvalidToken() from exc

        user = payload.get("user")
        if not isinstance(user, dict) or not user.get("id"):
            raise InvalidToken()
        is_master = user.get("isMaster", False)
        if not isinstance(is_master, bool):
            raise InvalidToken()
        return AuthClaims(user_id=str(user["id"]), is_master=is_master)
