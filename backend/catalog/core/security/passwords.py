"""bcrypt password hashing."""

from __future__ import annotations

import asyncio
from functools import lru_cache

import bcrypt

from catalog.config import settings
from catalog.core.errors import CredentialStoreError


def hash_password(password: str, rounds: int | None = None) -> bytes:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt)


def verify_password(plain_password: str, hashed_password: bytes) -> bool:
    """Verify a plaintext password against a hashed one.

    A mismatch returns ``False``; a stored hash bcrypt cannot parse raises
    ``CredentialStoreError``.
    """
    try:
        return bcrypt.checkpw(plain_password.encode(), hashed_password)
    except ValueError as exc:
        raise CredentialStoreError(f"unusable password hash: {exc}") from exc


@lru_cache(maxsize=1)
def _decoy_hash() -> bytes:
    return hash_password("decoy-password-never-matches")


async def burn_verification(plain_password: str) -> None:
    """Spend the time a real check would take, for accounts that do not exist."""
    await asyncio.to_thread(lambda: verify_password(plain_password, _decoy_hash()))


class Password:
    """A password hash plus, while it is being set, the plaintext it came from.

    Hashing runs in a worker thread so the event loop keeps serving other
    requests.
    """

    def __init__(self, hashed: bytes | None = None, plaintext: str | None = None) -> None:
        self.hash = hashed
        self.plaintext = plaintext

    async def set(self, plaintext: str) -> None:
        self.hash = await asyncio.to_thread(hash_password, plaintext)
        self.plaintext = plaintext

    async def matches(self, plaintext: str) -> bool:
        if not self.hash:
            raise CredentialStoreError("no password hash to compare against")
        return await asyncio.to_thread(verify_password, plaintext, self.hash)

    def forget_plaintext(self) -> None:
        self.plaintext = None

    def __repr__(self) -> str:
        return f"<Password(hash_set={self.hash is not None})>"
