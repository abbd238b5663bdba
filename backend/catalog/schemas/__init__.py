"""Pydantic schemas."""

from catalog.schemas.movie import MovieEnvelope, MovieInput, MovieListResponse, MovieResponse
from catalog.schemas.token import (
    AuthenticationRequest,
    AuthenticationTokenEnvelope,
    EmailRequest,
    TokenResponse,
)
from catalog.schemas.user import (
    ActivateUserRequest,
    MessageResponse,
    ResetPasswordRequest,
    UserCreate,
    UserEnvelope,
    UserResponse,
)

__all__ = [
    "ActivateUserRequest",
    "AuthenticationRequest",
    "AuthenticationTokenEnvelope",
    "EmailRequest",
    "MessageResponse",
    "MovieEnvelope",
    "MovieInput",
    "MovieListResponse",
    "MovieResponse",
    "ResetPasswordRequest",
    "TokenResponse",
    "UserCreate",
    "UserEnvelope",
    "UserResponse",
]
