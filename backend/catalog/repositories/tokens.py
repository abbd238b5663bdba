"""Token persistence. Only digests are written."""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import delete, insert

from catalog.core.security.tokens import IssuedToken, TokenScope, generate_token
from catalog.models.token import Token
from catalog.repositories.base import BaseRepository


class TokenRepository(BaseRepository):
    table = "tokens"

    async def new(self, user_id: int, ttl: timedelta, scope: TokenScope) -> IssuedToken:
        """Generate, store and return a token; its plaintext is not kept anywhere."""
        token = generate_token(user_id, ttl, scope)
        await self.insert(token)
        return token

    async def insert(self, token: IssuedToken) -> None:
        stmt = insert(Token).values(
            hash=token.hash,
            user_id=token.user_id,
            expiry=token.expiry,
            scope=token.scope.value,
        )
        await self._execute(stmt, "insert")

    async def delete_all_for_user(self, scope: TokenScope, user_id: int) -> None:
        stmt = delete(Token).where(Token.scope == scope.value, Token.user_id == user_id)
        await self._execute(stmt, "delete_all_for_user")
