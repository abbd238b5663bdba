"""Movie persistence with optimistic concurrency control."""

from __future__ import annotations

from sqlalchemy import and_, cast, delete, exists, func, insert, literal, select, true, update
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import ColumnElement

from catalog.core.errors import EditConflictError, NotFoundError
from catalog.core.filters import Filters, Metadata, calculate_metadata
from catalog.models.movie import Movie
from catalog.repositories.base import BaseRepository

MOVIE_SORT_SAFELIST = ("id", "title", "year", "runtime", "-id", "-title", "-year", "-runtime")

_SORT_COLUMNS = {
    "id": Movie.id,
    "title": Movie.title,
    "year": Movie.year,
    "runtime": Movie.runtime,
}


class MovieRepository(BaseRepository):
    table = "movies"

    async def insert(self, movie: Movie) -> Movie:
        """Store ``movie`` and fill in its id, creation time and version."""
        stmt = (
            insert(Movie)
            .values(
                title=movie.title,
                year=movie.year,
                runtime=movie.runtime,
                genres=list(movie.genres),
            )
            .returning(Movie.id, Movie.created_at, Movie.version)
        )
        row = (await self._execute(stmt, "insert")).one()
        movie.id, movie.created_at, movie.version = row.id, row.created_at, row.version
        return movie

    async def get(self, movie_id: int) -> Movie:
        if movie_id < 1:
            raise NotFoundError()
        result = await self._execute(select(Movie).where(Movie.id == movie_id), "get")
        movie = result.scalar_one_or_none()
        if movie is None:
            raise NotFoundError()
        return self._detach(movie)

    async def update(self, movie: Movie) -> int:
        """Write ``movie`` if its stored version is still ``movie.version``.

        Returns the new version. Raises ``EditConflictError`` when the row was
        changed or deleted in the meantime.
        """
        stmt = (
            update(Movie)
            .where(Movie.id == movie.id, Movie.version == movie.version)
            .values(
                title=movie.title,
                year=movie.year,
                runtime=movie.runtime,
                genres=list(movie.genres),
                version=Movie.version + 1,
            )
            .returning(Movie.version)
            .execution_options(synchronize_session=False)
        )
        new_version = (await self._execute(stmt, "update")).scalar_one_or_none()
        if new_version is None:
            raise EditConflictError()
        movie.version = new_version
        return new_version

    async def delete(self, movie_id: int) -> None:
        if movie_id < 1:
            raise NotFoundError()
        stmt = (
            delete(Movie)
            .where(Movie.id == movie_id)
            .returning(Movie.id)
            .execution_options(synchronize_session=False)
        )
        if (await self._execute(stmt, "delete")).scalar_one_or_none() is None:
            raise NotFoundError()

    async def list(
        self,
        title: str,
        genres: list[str],
        filters: Filters,
    ) -> tuple[list[Movie], Metadata]:
        """One page of movies plus metadata from the same query's window count."""
        column = _SORT_COLUMNS[filters.sort_column()]
        order = column.desc() if filters.sort_descending() else column.asc()

        stmt = (
            select(func.count().over().label("total_records"), Movie)
            .where(self._title_clause(title), self._genres_clause(genres))
            .order_by(order, Movie.id.asc())
            .limit(filters.limit())
            .offset(filters.offset())
        )
        rows = (await self._execute(stmt, "list")).all()

        total_records = 0
        movies: list[Movie] = []
        for row in rows:
            total_records = row.total_records
            movies.append(row.Movie)
        return movies, calculate_metadata(total_records, filters.page, filters.page_size)

    def _title_clause(self, title: str) -> ColumnElement[bool]:
        if not title:
            return true()
        if self.dialect == "postgresql":
            return func.to_tsvector("simple", Movie.title).bool_op("@@")(
                func.plainto_tsquery("simple", title)
            )
        return Movie.title.icontains(title, autoescape=True)

    def _genres_clause(self, genres: list[str]) -> ColumnElement[bool]:
        if not genres:
            return true()
        if self.dialect == "postgresql":
            return cast(Movie.genres, JSONB).contains(genres)
        clauses = []
        for genre in genres:
            elements = func.json_each(Movie.genres).table_valued("value")
            clauses.append(exists(select(literal(1)).select_from(elements).where(elements.c.value == genre)))
        return and_(*clauses)
