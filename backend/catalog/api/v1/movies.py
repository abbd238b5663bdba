"""Movie API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Response, status

from catalog.core.errors import EditConflictError, ValidationFailedError
from catalog.core.filters import Filters, validate_filters
from catalog.core.security.auth import require_permission
from catalog.core.validator import Validator
from catalog.api.deps import DbSession, get_movie_repository
from catalog.db.session import commit
from catalog.models.movie import Movie, validate_movie
from catalog.models.permission import MOVIES_READ, MOVIES_WRITE
from catalog.models.user import User
from catalog.repositories import MOVIE_SORT_SAFELIST, MovieRepository
from catalog.schemas import MessageResponse, MovieEnvelope, MovieInput, MovieListResponse

router = APIRouter()

MovieReader = Annotated[User, Depends(require_permission(MOVIES_READ))]
MovieWriter = Annotated[User, Depends(require_permission(MOVIES_WRITE))]
Movies = Annotated[MovieRepository, Depends(get_movie_repository)]


@router.get("", response_model=MovieListResponse)
async def list_movies(
    _: MovieReader,
    movies: Movies,
    title: str = "",
    genres: str = "",
    page: int = 1,
    page_size: int = 20,
    sort: str = "id",
) -> MovieListResponse:
    """List movies filtered by title and genres (comma separated)."""
    filters = Filters(page=page, page_size=page_size, sort=sort, sort_safelist=MOVIE_SORT_SAFELIST)
    v = Validator()
    validate_filters(v, filters)
    v.raise_if_invalid()

    genre_list = genres.split(",") if genres else []
    items, metadata = await movies.list(title, genre_list, filters)
    return MovieListResponse.model_validate(
        {"movies": items, "metadata": metadata.to_dict()},
        from_attributes=True,
    )


@router.post("", response_model=MovieEnvelope, status_code=status.HTTP_201_CREATED)
async def create_movie(
    movie_in: MovieInput,
    response: Response,
    _: MovieWriter,
    movies: Movies,
    db: DbSession,
) -> MovieEnvelope:
    """Create a new movie."""
    movie = Movie(
        title=movie_in.title,
        year=movie_in.year,
        runtime=movie_in.runtime,
        genres=movie_in.genres,
    )
    v = Validator()
    validate_movie(v, movie)
    v.raise_if_invalid()

    await movies.insert(movie)
    await commit(db)
    response.headers["Location"] = f"/api/v1/movies/{movie.id}"
    return MovieEnvelope.model_validate({"movie": movie}, from_attributes=True)


@router.get("/{movie_id}", response_model=MovieEnvelope)
async def show_movie(movie_id: int, _: MovieReader, movies: Movies) -> MovieEnvelope:
    """Get a specific movie by ID."""
    movie = await movies.get(movie_id)
    return MovieEnvelope.model_validate({"movie": movie}, from_attributes=True)


@router.patch("/{movie_id}", response_model=MovieEnvelope)
async def update_movie(
    movie_id: int,
    movie_in: MovieInput,
    _: MovieWriter,
    movies: Movies,
    db: DbSession,
    expected_version: Annotated[str | None, Header(alias="X-Expected-Version")] = None,
) -> MovieEnvelope:
    """Partially update a movie.

    The write only lands if nobody changed the movie since it was read here;
    ``X-Expected-Version`` lets the client pin the version it last saw.
    """
    expected = _parse_expected_version(expected_version)
    movie = await movies.get(movie_id)
    if expected is not None and expected != movie.version:
        raise EditConflictError()

    for field, value in movie_in.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(movie, field, value)

    v = Validator()
    validate_movie(v, movie)
    v.raise_if_invalid()

    await movies.update(movie)
    await commit(db)
    return MovieEnvelope.model_validate({"movie": movie}, from_attributes=True)


@router.delete("/{movie_id}", response_model=MessageResponse)
async def delete_movie(movie_id: int, _: MovieWriter, movies: Movies, db: DbSession) -> MessageResponse:
    """Delete a movie."""
    await movies.delete(movie_id)
    await commit(db)
    return MessageResponse(message="movie successfully deleted")


def _parse_expected_version(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationFailedError({"X-Expected-Version": "must be an integer value"}) from None
