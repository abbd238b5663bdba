"""Bearer-token authentication and permission checks."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Annotated, ClassVar

from fastapi import Depends, Request

from catalog.api.deps import get_permission_repository, get_user_repository
from catalog.core.errors import (
    AuthenticationRequiredError,
    InactiveAccountError,
    InvalidAuthenticationTokenError,
    NotFoundError,
    NotPermittedError,
)
from catalog.core.security.tokens import TokenScope, validate_token_plaintext
from catalog.core.validator import Validator
from catalog.models.user import User
from catalog.repositories import PermissionRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnonymousIdentity:
    """A request that carried no credentials."""

    is_anonymous: ClassVar[bool] = True


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """A request whose bearer token resolved to ``user``."""

    user: User
    is_anonymous: ClassVar[bool] = False


Identity = AnonymousIdentity | AuthenticatedIdentity

ANONYMOUS = AnonymousIdentity()


async def get_identity(
    request: Request,
    users: UserRepository = Depends(get_user_repository),
) -> Identity:
    """Resolve the caller from the ``Authorization`` header.

    No header means anonymous. A header that is present but malformed, or
    whose token is unknown or expired, is rejected outright.
    """
    header = request.headers.get("Authorization")
    if header is None:
        request.state.identity = ANONYMOUS
        return ANONYMOUS

    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise InvalidAuthenticationTokenError()
    token = parts[1]

    v = Validator()
    validate_token_plaintext(v, token)
    if not v.valid():
        raise InvalidAuthenticationTokenError()

    try:
        user = await users.get_for_token(TokenScope.AUTHENTICATION, token)
    except NotFoundError:
        raise InvalidAuthenticationTokenError() from None

    identity = AuthenticatedIdentity(user)
    request.state.identity = identity
    return identity


async def require_authenticated_user(
    identity: Identity = Depends(get_identity),
) -> User:
    if isinstance(identity, AuthenticatedIdentity):
        return identity.user
    raise AuthenticationRequiredError()


async def require_activated_user(
    user: User = Depends(require_authenticated_user),
) -> User:
    if not user.activated:
        raise InactiveAccountError()
    return user


async def get_user_permissions(
    user: User = Depends(require_activated_user),
    permissions: PermissionRepository = Depends(get_permission_repository),
) -> frozenset[str]:
    """Permission codes of the current user, loaded once per request."""
    return await permissions.get_all_for_user(user.id)


def require_permission(code: str) -> Callable[..., Awaitable[User]]:
    """Dependency factory: the activated user, if they hold ``code``."""

    async def check_permission(
        user: User = Depends(require_activated_user),
        granted: frozenset[str] = Depends(get_user_permissions),
    ) -> User:
        if code not in granted:
            logger.info("User %s lacks permission %s", user.id, code, extra={"user_id": user.id})
            raise NotPermittedError()
        return user

    check_permission.__name__ = f"require_{code.replace(':', '_')}"
    return check_permission


# Convenience type aliases for route dependencies
CurrentIdentity = Annotated[Identity, Depends(get_identity)]
AuthenticatedUser = Annotated[User, Depends(require_authenticated_user)]
ActivatedUser = Annotated[User, Depends(require_activated_user)]
