"""Shared pytest fixtures for the catalog API tests."""

from __future__ import annotations

import os

# Settings are read at import time; point them at throwaway resources first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LIMITER_ENABLED", "false")
os.environ.setdefault("ENABLE_TRACING", "false")
os.environ.setdefault("AUTO_CREATE_SCHEMA", "false")

from dataclasses import dataclass, field  # noqa: E402
from datetime import timedelta  # noqa: E402
from typing import Any, AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from catalog.core.security.passwords import Password  # noqa: E402
from catalog.core.security.tokens import TokenScope  # noqa: E402
from catalog.db.session import get_db, init_db  # noqa: E402
from catalog.main import create_application  # noqa: E402
from catalog.models.user import User  # noqa: E402
from catalog.repositories import PermissionRepository, TokenRepository, UserRepository  # noqa: E402


# ── Fakes ─────────────────────────────────────────────────────────────────────

@dataclass
class FakeMailer:
    """Records what would have been sent instead of talking to SMTP."""

    sent: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    async def send(self, recipient: str, template_name: str, data: dict[str, Any]) -> None:
        self.sent.append((recipient, template_name, data))


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ── Database ──────────────────────────────────────────────────────────────────

@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database with tables and permissions in place."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as s:
        yield s


# ── Application ───────────────────────────────────────────────────────────────

@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def app(session_factory: async_sessionmaker[AsyncSession], mailer: FakeMailer) -> FastAPI:
    """Application wired to the test database, without a rate limiter."""
    application = create_application(mailer=mailer)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as s:
            try:
                yield s
            except Exception:
                await s.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client bound to ``app``; waits for background mail on exit."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    await app.state.background.wait(timeout=5)
    app.dependency_overrides.clear()


# ── Data helpers ──────────────────────────────────────────────────────────────

@dataclass
class AccountFixture:
    user: User
    password: str
    token: str | None = None


async def make_account(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    email: str = "alice@example.com",
    name: str = "Alice",
    password: str = "pa55word-long",
    activated: bool = True,
    permissions: tuple[str, ...] = (),
    with_token: bool = True,
) -> AccountFixture:
    """Store a user (optionally activated and granted ``permissions``) and log them in."""
    async with session_factory() as s:
        pw = Password()
        await pw.set(password)
        user = User(name=name, email=email, activated=activated)
        user.set_password(pw)
        await UserRepository(s).insert(user)
        if permissions:
            await PermissionRepository(s).add_for_user(user.id, *permissions)
        token = None
        if with_token:
            issued = await TokenRepository(s).new(user.id, timedelta(hours=1), TokenScope.AUTHENTICATION)
            token = issued.plaintext
        await s.commit()
    return AccountFixture(user=user, password=password, token=token)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
