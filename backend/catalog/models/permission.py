"""Permission codes and their many-to-many link to users."""

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String, Table, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from catalog.db.base import Base, IntIDMixin

MOVIES_READ = "movies:read"
MOVIES_WRITE = "movies:write"
DEFAULT_PERMISSION_CODES = (MOVIES_READ, MOVIES_WRITE)

_ID_TYPE = BigInteger().with_variant(Integer, "sqlite")

users_permissions = Table(
    "users_permissions",
    Base.metadata,
    Column("user_id", _ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "permission_id",
        _ID_TYPE,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Permission(Base, IntIDMixin):
    """A ``resource:action`` code such as ``movies:write``."""

    __tablename__ = "permissions"

    code: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Permission(code={self.code})>"


async def seed_permissions(session: AsyncSession, codes: tuple[str, ...] = DEFAULT_PERMISSION_CODES) -> None:
    """Insert any of ``codes`` that are not stored yet."""
    result = await session.execute(select(Permission.code).where(Permission.code.in_(codes)))
    existing = set(result.scalars().all())
    for code in codes:
        if code not in existing:
            session.add(Permission(code=code))
    await session.flush()
