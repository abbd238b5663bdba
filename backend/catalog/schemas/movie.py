"""Pydantic schemas for Movie."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class MovieInput(BaseModel):
    """Body for creating a movie, and for partial updates (omitted = unchanged).

    Field rules are enforced by ``validate_movie`` so that every error comes
    back keyed by field in one response.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    title: str | None = None
    year: int | None = None
    runtime: int | None = None
    genres: list[str] | None = None


class MovieResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    year: int
    runtime: int
    genres: list[str]
    version: int


class MovieEnvelope(BaseModel):
    movie: MovieResponse


class MovieListResponse(BaseModel):
    movies: list[MovieResponse]
    metadata: dict[str, int]
