"""FastAPI dependency providers for repositories and app-scoped services."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.background import BackgroundRunner
from catalog.db.session import get_db
from catalog.repositories import (
    MovieRepository,
    PermissionRepository,
    TokenRepository,
    UserRepository,
)
from catalog.services.mailer import Mailer


async def get_movie_repository(db: AsyncSession = Depends(get_db)) -> MovieRepository:
    return MovieRepository(db)


async def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


async def get_token_repository(db: AsyncSession = Depends(get_db)) -> TokenRepository:
    return TokenRepository(db)


async def get_permission_repository(db: AsyncSession = Depends(get_db)) -> PermissionRepository:
    return PermissionRepository(db)


def get_background(request: Request) -> BackgroundRunner:
    return request.app.state.background


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


# The same per-request session the repositories were built on.
DbSession = Annotated[AsyncSession, Depends(get_db)]
