"""Unit tests for the credential store and token manager.

Total: 17 tests
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

import pytest

from catalog.core.errors import CredentialStoreError
from catalog.core.security.passwords import (
    Password,
    burn_verification,
    hash_password,
    verify_password,
)
from catalog.core.security.tokens import (
    TOKEN_PLAINTEXT_LENGTH,
    TokenScope,
    generate_token,
    hash_token,
    validate_token_plaintext,
)
from catalog.core.validator import Validator

# ── Password hashing ──────────────────────────────────────────────────────────


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("mysecretpassword", rounds=4)
        assert hashed != b"mysecretpassword"
        assert verify_password("mysecretpassword", hashed)

    def test_wrong_password(self):
        hashed = hash_password("correct-horse", rounds=4)
        assert not verify_password("battery-staple", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("same-password", rounds=4) != hash_password("same-password", rounds=4)

    def test_unparseable_hash_raises(self):
        with pytest.raises(CredentialStoreError):
            verify_password("whatever", b"not-a-bcrypt-hash")


class TestPassword:
    @pytest.mark.asyncio
    async def test_set_then_matches(self):
        pw = Password()
        await pw.set("pa55word-long")
        assert pw.plaintext == "pa55word-long"
        assert await pw.matches("pa55word-long")
        assert not await pw.matches("pa55word-wrong")

    @pytest.mark.asyncio
    async def test_matches_without_hash_raises(self):
        with pytest.raises(CredentialStoreError):
            await Password().matches("anything")

    @pytest.mark.asyncio
    async def test_forget_plaintext_keeps_hash(self):
        pw = Password()
        await pw.set("pa55word-long")
        pw.forget_plaintext()
        assert pw.plaintext is None
        assert await pw.matches("pa55word-long")

    def test_repr_hides_hash(self):
        pw = Password(hashed=b"$2b$04$secret")
        assert "secret" not in repr(pw)

    @pytest.mark.asyncio
    async def test_wraps_stored_hash(self):
        stored = hash_password("pa55word-long", rounds=4)
        pw = Password(hashed=stored)
        assert pw.hash == stored
        assert pw.plaintext is None
        assert await pw.matches("pa55word-long")

    @pytest.mark.asyncio
    async def test_burn_verification_returns_nothing(self):
        assert await burn_verification("any-password") is None


# ── Tokens ────────────────────────────────────────────────────────────────────


class TestTokenGeneration:
    def test_plaintext_shape(self):
        token = generate_token(1, timedelta(hours=1), TokenScope.AUTHENTICATION)
        assert len(token.plaintext) == TOKEN_PLAINTEXT_LENGTH == 26
        assert re.fullmatch(r"[A-Z2-7]{26}", token.plaintext)

    def test_hash_is_sha256_of_plaintext(self):
        token = generate_token(1, timedelta(hours=1), TokenScope.ACTIVATION)
        assert token.hash == hash_token(token.plaintext)
        assert len(token.hash) == 32

    def test_expiry_is_now_plus_ttl(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        token = generate_token(7, timedelta(minutes=45), TokenScope.PASSWORD_RESET, now=now)
        assert token.expiry == now + timedelta(minutes=45)
        assert token.user_id == 7
        assert token.scope is TokenScope.PASSWORD_RESET

    def test_tokens_are_unique(self):
        plaintexts = {generate_token(1, timedelta(hours=1), TokenScope.ACTIVATION).plaintext for _ in range(50)}
        assert len(plaintexts) == 50

    def test_repr_hides_plaintext(self):
        token = generate_token(1, timedelta(hours=1), TokenScope.AUTHENTICATION)
        assert token.plaintext not in repr(token)


class TestValidateTokenPlaintext:
    def test_missing_token(self):
        v = Validator()
        validate_token_plaintext(v, "")
        assert v.errors == {"token": "must be provided"}

    def test_wrong_length(self):
        v = Validator()
        validate_token_plaintext(v, "A" * 25)
        assert v.errors == {"token": "must be 26 bytes long"}
