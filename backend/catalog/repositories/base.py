"""Shared statement execution for repositories.

Every statement runs under a hard timeout and inside a tracing span. Driver
and timeout failures become ``InfrastructureError``s; ``IntegrityError`` is
left for the calling repository to translate, since only it knows which
constraint means what.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from catalog.config import settings
from catalog.core.errors import DatabaseError, QueryTimeoutError
from catalog.core.tracing import create_span

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseRepository:
    """Base class holding the request's session and the query timeout."""

    table: str = ""

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        self.session = session
        self.timeout = timeout if timeout is not None else settings.query_timeout

    @property
    def dialect(self) -> str:
        return self.session.get_bind().dialect.name

    async def _execute(self, statement: Executable, operation: str) -> Any:
        with create_span(f"db.{self.table}.{operation}", {"db.table": self.table}):
            try:
                return await asyncio.wait_for(
                    self.session.execute(statement),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError as exc:
                logger.error("DB %s on %s timed out after %ss", operation, self.table, self.timeout)
                raise QueryTimeoutError(operation, self.timeout) from exc
            except IntegrityError:
                raise
            except SQLAlchemyError as exc:
                logger.error("DB %s on %s failed: %s", operation, self.table, exc)
                raise DatabaseError(operation, str(exc)) from exc

    def _detach(self, entity: T | None) -> T | None:
        """Stop the session tracking ``entity``.

        Callers mutate what they read and persist it through the explicit,
        version-checked ``update``; a tracked instance would otherwise be
        flushed unconditionally at commit.
        """
        if entity is not None:
            self.session.expunge(entity)
        return entity
