"""Movie model."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from catalog.core.validator import Validator, unique, valid_string, within_range
from catalog.db.base import Base, CreatedAtMixin, IntIDMixin, VersionMixin

MIN_YEAR = 1888
MAX_GENRES = 5


class Movie(Base, IntIDMixin, CreatedAtMixin, VersionMixin):
    """A catalogue entry."""

    __tablename__ = "movies"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    runtime: Mapped[int] = mapped_column(Integer, nullable=False)
    genres: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Movie(id={self.id}, title={self.title!r}, version={self.version})>"


def validate_movie(v: Validator, movie: Movie) -> None:
    v.check(valid_string(movie.title, 1, 500), "title", "must not be empty and less than 500 bytes")
    v.check(
        within_range(movie.year, MIN_YEAR, datetime.now(timezone.utc).year),
        "year",
        "must be between 1888 and current year",
    )
    v.check(movie.runtime is not None and movie.runtime > 0, "runtime", "must be a positive integer")
    v.check(movie.genres is not None, "genres", "must be provided")
    v.check(
        within_range(len(movie.genres or []), 1, MAX_GENRES),
        "genres",
        "must contain between 1 and 5 genres",
    )
    v.check(unique(movie.genres), "genres", "must not contain duplicate and empty values")
