"""User persistence."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from catalog.core.errors import DatabaseError, DuplicateEmailError, EditConflictError, NotFoundError
from catalog.core.security.tokens import TokenScope, hash_token
from catalog.models.token import Token
from catalog.models.user import User, ensure_password_hash
from catalog.repositories.base import BaseRepository


def _is_email_violation(exc: IntegrityError) -> bool:
    detail = str(exc.orig).lower()
    return "email" in detail and ("unique" in detail or "duplicate" in detail)


class UserRepository(BaseRepository):
    table = "users"

    async def insert(self, user: User) -> User:
        """Store a new user. Raises ``DuplicateEmailError`` if the email is taken."""
        ensure_password_hash(user)
        stmt = (
            insert(User)
            .values(
                name=user.name,
                email=user.email,
                password_hash=user.password_hash,
                activated=bool(user.activated),
            )
            .returning(User.id, User.created_at, User.version)
        )
        try:
            row = (await self._execute(stmt, "insert")).one()
        except IntegrityError as exc:
            if _is_email_violation(exc):
                raise DuplicateEmailError() from exc
            raise DatabaseError("insert", str(exc.orig)) from exc
        user.id, user.created_at, user.version = row.id, row.created_at, row.version
        return user

    async def get_by_email(self, email: str) -> User:
        result = await self._execute(select(User).where(User.email == email), "get_by_email")
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError()
        return self._detach(user)

    async def update(self, user: User) -> int:
        """Version-checked update; see ``MovieRepository.update``."""
        ensure_password_hash(user)
        stmt = (
            update(User)
            .where(User.id == user.id, User.version == user.version)
            .values(
                name=user.name,
                email=user.email,
                password_hash=user.password_hash,
                activated=user.activated,
                version=User.version + 1,
            )
            .returning(User.version)
            .execution_options(synchronize_session=False)
        )
        try:
            new_version = (await self._execute(stmt, "update")).scalar_one_or_none()
        except IntegrityError as exc:
            if _is_email_violation(exc):
                raise DuplicateEmailError() from exc
            raise DatabaseError("update", str(exc.orig)) from exc
        if new_version is None:
            raise EditConflictError()
        user.version = new_version
        return new_version

    async def get_for_token(
        self,
        scope: TokenScope,
        plaintext: str,
        now: datetime | None = None,
    ) -> User:
        """The user owning an unexpired ``scope`` token whose plaintext is ``plaintext``."""
        now = now or datetime.now(timezone.utc)
        stmt = (
            select(User)
            .join(Token, Token.user_id == User.id)
            .where(
                Token.hash == hash_token(plaintext),
                Token.scope == scope.value,
                Token.expiry > now,
            )
        )
        user = (await self._execute(stmt, "get_for_token")).scalar_one_or_none()
        if user is None:
            raise NotFoundError()
        return self._detach(user)
