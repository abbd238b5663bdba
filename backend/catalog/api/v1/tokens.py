"""Token issuance endpoints."""

import logging
from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, status

from catalog.api.deps import (
    DbSession,
    get_background,
    get_mailer,
    get_token_repository,
    get_user_repository,
)
from catalog.config import settings
from catalog.core.background import BackgroundRunner
from catalog.core.errors import InvalidCredentialsError, NotFoundError, ValidationFailedError
from catalog.core.security.passwords import burn_verification
from catalog.core.security.tokens import TokenScope
from catalog.core.validator import Validator
from catalog.db.session import commit
from catalog.models.user import validate_email, validate_password_plaintext
from catalog.repositories import TokenRepository, UserRepository
from catalog.schemas import (
    AuthenticationRequest,
    AuthenticationTokenEnvelope,
    EmailRequest,
    MessageResponse,
    TokenResponse,
)
from catalog.services.mailer import Mailer

logger = logging.getLogger(__name__)

router = APIRouter()

Users = Annotated[UserRepository, Depends(get_user_repository)]
Tokens = Annotated[TokenRepository, Depends(get_token_repository)]
Background = Annotated[BackgroundRunner, Depends(get_background)]
MailerDep = Annotated[Mailer, Depends(get_mailer)]


@router.post(
    "/authentication",
    response_model=AuthenticationTokenEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def create_authentication_token(
    body: AuthenticationRequest,
    users: Users,
    tokens: Tokens,
    db: DbSession,
) -> AuthenticationTokenEnvelope:
    """Exchange email and password for a bearer token.

    Unknown addresses and wrong passwords get the same 401, and an unknown
    address still pays for one bcrypt comparison.
    """
    v = Validator()
    validate_email(v, body.email)
    validate_password_plaintext(v, body.password)
    v.raise_if_invalid()

    try:
        user = await users.get_by_email(body.email)
    except NotFoundError:
        await burn_verification(body.password)
        raise InvalidCredentialsError() from None

    if not await user.password.matches(body.password):
        logger.info("Failed login for user %s", user.id, extra={"user_id": user.id})
        raise InvalidCredentialsError()

    token = await tokens.new(
        user.id,
        timedelta(hours=settings.authentication_token_ttl_hours),
        TokenScope.AUTHENTICATION,
    )
    await commit(db)
    return AuthenticationTokenEnvelope(
        authentication_token=TokenResponse(token=token.plaintext, expiry=token.expiry),
    )


@router.post("/activation", response_model=MessageResponse, status_code=status.HTTP_202_ACCEPTED)
async def create_activation_token(
    body: EmailRequest,
    users: Users,
    tokens: Tokens,
    background: Background,
    mailer: MailerDep,
    db: DbSession,
) -> MessageResponse:
    """Send a fresh activation token to an account that is not yet active."""
    v = Validator()
    validate_email(v, body.email)
    v.raise_if_invalid()

    try:
        user = await users.get_by_email(body.email)
    except NotFoundError:
        raise ValidationFailedError({"email": "no matching email address found"}) from None

    if user.activated:
        raise ValidationFailedError({"email": "user has already been activated"})

    token = await tokens.new(
        user.id,
        timedelta(hours=settings.activation_token_ttl_hours),
        TokenScope.ACTIVATION,
    )
    await commit(db)
    background.spawn(
        mailer.send,
        user.email,
        "token_activation.jinja2",
        {"activation_token": token.plaintext},
        name=f"activation-mail-{user.id}",
    )
    return MessageResponse(message="an email will be sent to you containing activation instructions")


@router.post("/password-reset", response_model=MessageResponse, status_code=status.HTTP_202_ACCEPTED)
async def create_password_reset_token(
    body: EmailRequest,
    users: Users,
    tokens: Tokens,
    background: Background,
    mailer: MailerDep,
    db: DbSession,
) -> MessageResponse:
    """Send a password-reset token to an activated account."""
    v = Validator()
    validate_email(v, body.email)
    v.raise_if_invalid()

    try:
        user = await users.get_by_email(body.email)
    except NotFoundError:
        raise ValidationFailedError({"email": "no matching email address found"}) from None

    if not user.activated:
        raise ValidationFailedError({"email": "user account must be activated"})

    token = await tokens.new(
        user.id,
        timedelta(minutes=settings.password_reset_token_ttl_minutes),
        TokenScope.PASSWORD_RESET,
    )
    await commit(db)
    background.spawn(
        mailer.send,
        user.email,
        "token_password_reset.jinja2",
        {"password_reset_token": token.plaintext},
        name=f"password-reset-mail-{user.id}",
    )
    return MessageResponse(
        message="an email will be sent to you containing password reset instructions",
    )
