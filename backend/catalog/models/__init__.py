"""Database models."""

from catalog.models.movie import Movie
from catalog.models.permission import Permission, users_permissions
from catalog.models.token import Token
from catalog.models.user import User

__all__ = [
    "Movie",
    "Permission",
    "Token",
    "User",
    "users_permissions",
]
