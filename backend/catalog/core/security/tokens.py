"""Opaque bearer tokens.

A token is 16 random bytes rendered as 26 base-32 characters. Only the
SHA-256 digest of that text is ever stored; the plaintext goes back to the
caller once, at issuance.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from catalog.core.validator import Validator

TOKEN_BYTES = 16
TOKEN_PLAINTEXT_LENGTH = 26


class TokenScope(str, Enum):
    """Purpose a token may be used for."""

    ACTIVATION = "activation"
    AUTHENTICATION = "authentication"
    PASSWORD_RESET = "password-reset"


@dataclass(frozen=True)
class IssuedToken:
    plaintext: str
    hash: bytes
    user_id: int
    expiry: datetime
    scope: TokenScope

    def __repr__(self) -> str:
        return f"<IssuedToken(user_id={self.user_id}, scope={self.scope.value}, expiry={self.expiry})>"


def hash_token(plaintext: str) -> bytes:
    return hashlib.sha256(plaintext.encode()).digest()


def generate_token(
    user_id: int,
    ttl: timedelta,
    scope: TokenScope,
    now: datetime | None = None,
) -> IssuedToken:
    """Create a fresh random token for ``user_id`` valid for ``ttl``."""
    now = now or datetime.now(timezone.utc)
    plaintext = base64.b32encode(secrets.token_bytes(TOKEN_BYTES)).decode().rstrip("=")
    return IssuedToken(
        plaintext=plaintext,
        hash=hash_token(plaintext),
        user_id=user_id,
        expiry=now + ttl,
        scope=scope,
    )


def validate_token_plaintext(v: Validator, plaintext: str | None) -> None:
    v.check(bool(plaintext), "token", "must be provided")
    v.check(
        plaintext is not None and len(plaintext.encode()) == TOKEN_PLAINTEXT_LENGTH,
        "token",
        "must be 26 bytes long",
    )
