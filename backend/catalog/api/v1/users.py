"""User registration, activation and password reset endpoints."""

import logging
from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, status

from catalog.api.deps import (
    DbSession,
    get_background,
    get_mailer,
    get_permission_repository,
    get_token_repository,
    get_user_repository,
)
from catalog.config import settings
from catalog.core.background import BackgroundRunner
from catalog.core.errors import NotFoundError, ValidationFailedError
from catalog.core.security.passwords import Password
from catalog.core.security.tokens import TokenScope, validate_token_plaintext
from catalog.core.validator import Validator
from catalog.db.session import commit
from catalog.models.permission import MOVIES_READ
from catalog.models.user import User, validate_password_plaintext, validate_user
from catalog.repositories import PermissionRepository, TokenRepository, UserRepository
from catalog.schemas import (
    ActivateUserRequest,
    MessageResponse,
    ResetPasswordRequest,
    UserCreate,
    UserEnvelope,
)
from catalog.services.mailer import Mailer

logger = logging.getLogger(__name__)

router = APIRouter()

Users = Annotated[UserRepository, Depends(get_user_repository)]
Tokens = Annotated[TokenRepository, Depends(get_token_repository)]


@router.post("", response_model=UserEnvelope, status_code=status.HTTP_202_ACCEPTED)
async def register_user(
    user_in: UserCreate,
    users: Users,
    tokens: Tokens,
    permissions: Annotated[PermissionRepository, Depends(get_permission_repository)],
    background: Annotated[BackgroundRunner, Depends(get_background)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
    db: DbSession,
) -> UserEnvelope:
    """Register an inactive account and e-mail its activation token.

    The new user is granted ``movies:read``. The welcome e-mail goes out in
    the background; a delivery failure is logged and does not affect the
    response.
    """
    user = User(name=user_in.name, email=user_in.email, activated=False)
    password = Password(plaintext=user_in.password)

    v = Validator()
    validate_user(v, user, password)
    v.raise_if_invalid()

    await password.set(user_in.password)
    user.set_password(password)

    await users.insert(user)
    await permissions.add_for_user(user.id, MOVIES_READ)
    token = await tokens.new(
        user.id,
        timedelta(hours=settings.activation_token_ttl_hours),
        TokenScope.ACTIVATION,
    )
    await commit(db)

    background.spawn(
        mailer.send,
        user.email,
        "user_welcome.jinja2",
        {"user_id": user.id, "activation_token": token.plaintext},
        name=f"welcome-mail-{user.id}",
    )
    logger.info("Registered user %s", user.id, extra={"user_id": user.id})
    return UserEnvelope.model_validate({"user": user}, from_attributes=True)


@router.put("/activated", response_model=UserEnvelope)
async def activate_user(
    body: ActivateUserRequest,
    users: Users,
    tokens: Tokens,
    db: DbSession,
) -> UserEnvelope:
    """Activate the account an activation token was issued for."""
    v = Validator()
    validate_token_plaintext(v, body.token)
    v.raise_if_invalid()

    try:
        user = await users.get_for_token(TokenScope.ACTIVATION, body.token)
    except NotFoundError:
        raise ValidationFailedError({"token": "invalid or expired activation token"}) from None

    user.activated = True
    await users.update(user)
    await tokens.delete_all_for_user(TokenScope.ACTIVATION, user.id)
    await commit(db)

    logger.info("Activated user %s", user.id, extra={"user_id": user.id})
    return UserEnvelope.model_validate({"user": user}, from_attributes=True)


@router.put("/password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    users: Users,
    tokens: Tokens,
    db: DbSession,
) -> MessageResponse:
    """Set a new password using a password-reset token."""
    v = Validator()
    validate_password_plaintext(v, body.password)
    validate_token_plaintext(v, body.token)
    v.raise_if_invalid()

    try:
        user = await users.get_for_token(TokenScope.PASSWORD_RESET, body.token)
    except NotFoundError:
        raise ValidationFailedError({"token": "invalid or expired password reset token"}) from None

    password = Password()
    await password.set(body.password)
    user.set_password(password)

    await users.update(user)
    await tokens.delete_all_for_user(TokenScope.PASSWORD_RESET, user.id)
    await commit(db)

    logger.info("Reset password for user %s", user.id, extra={"user_id": user.id})
    return MessageResponse(message="your password was successfully reset")
