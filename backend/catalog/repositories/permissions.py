"""Permission lookups and grants."""

from __future__ import annotations

from sqlalchemy import insert, literal, select

from catalog.models.permission import Permission, users_permissions
from catalog.repositories.base import BaseRepository


class PermissionRepository(BaseRepository):
    table = "permissions"

    async def get_all_for_user(self, user_id: int) -> frozenset[str]:
        stmt = (
            select(Permission.code)
            .join(users_permissions, users_permissions.c.permission_id == Permission.id)
            .where(users_permissions.c.user_id == user_id)
        )
        result = await self._execute(stmt, "get_all_for_user")
        return frozenset(result.scalars().all())

    async def add_for_user(self, user_id: int, *codes: str) -> None:
        """Grant ``codes`` to the user. Unknown codes are ignored."""
        if not codes:
            return
        stmt = insert(users_permissions).from_select(
            ["user_id", "permission_id"],
            select(literal(user_id), Permission.id).where(Permission.code.in_(codes)),
        )
        await self._execute(stmt, "add_for_user")
