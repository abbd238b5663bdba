"""Repositories: all reads and writes of persisted entities."""

from catalog.repositories.movies import MOVIE_SORT_SAFELIST, MovieRepository
from catalog.repositories.permissions import PermissionRepository
from catalog.repositories.tokens import TokenRepository
from catalog.repositories.users import UserRepository

__all__ = [
    "MOVIE_SORT_SAFELIST",
    "MovieRepository",
    "PermissionRepository",
    "TokenRepository",
    "UserRepository",
]
