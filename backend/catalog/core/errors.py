"""Error hierarchy for the catalog API.

Every expected failure is a ``CatalogError`` carrying its client-facing code,
message and HTTP status; a single FastAPI handler turns them into JSON.
Infrastructure errors keep their detail for the logs and expose only a
generic message.

``ContractViolation`` is not an ``Exception``: it marks a state that correct
code can never reach (a persisted user without a password hash,
an unchecked sort key reaching the query layer). No handler in the
application catches it.
"""

from __future__ import annotations

from typing import Any


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    code = "ERROR"
    http_status = 500

    def __init__(
        self,
        message: str,
        *,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.headers = headers or {}

    def to_response(self) -> dict[str, Any]:
        """Convert to the REST error envelope."""
        return {"error": {"code": self.code, "message": self.message}}


# ─── Client errors ────────────────────────────────────────────────────────────

class ValidationFailedError(CatalogError):
    """One or more fields failed validation."""

    code = "VALIDATION_FAILED"
    http_status = 422

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("the request contains invalid fields")
        self.errors = dict(errors)

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        body["error"]["fields"] = self.errors
        return body


class BadRequestError(CatalogError):
    code = "BAD_REQUEST"
    http_status = 400


class NotFoundError(CatalogError):
    """Requested resource does not exist."""

    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, message: str = "the requested resource could not be found") -> None:
        super().__init__(message)


class DuplicateEmailError(ValidationFailedError):
    """A user with this email address already exists."""

    def __init__(self) -> None:
        super().__init__({"email": "a user with this email address already exists"})


class EditConflictError(CatalogError):
    """The record changed (or vanished) since the caller last read it."""

    code = "EDIT_CONFLICT"
    http_status = 409

    def __init__(
        self,
        message: str = "unable to update the record due to an edit conflict, please try again",
    ) -> None:
        super().__init__(message)


class InvalidCredentialsError(CatalogError):
    code = "INVALID_CREDENTIALS"
    http_status = 401

    def __init__(self) -> None:
        super().__init__("invalid authentication credentials")


class InvalidAuthenticationTokenError(CatalogError):
    code = "INVALID_TOKEN"
    http_status = 401

    def __init__(self) -> None:
        super().__init__(
            "invalid or missing authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthenticationRequiredError(CatalogError):
    code = "AUTHENTICATION_REQUIRED"
    http_status = 401

    def __init__(self) -> None:
        super().__init__("you must be authenticated to access this resource")


class InactiveAccountError(CatalogError):
    code = "INACTIVE_ACCOUNT"
    http_status = 403

    def __init__(self) -> None:
        super().__init__("your user account must be activated to access this resource")


class NotPermittedError(CatalogError):
    code = "FORBIDDEN"
    http_status = 403

    def __init__(self) -> None:
        super().__init__(
            "your user account doesn't have the necessary permissions to access this resource"
        )


class RateLimitedError(CatalogError):
    code = "RATE_LIMIT_EXCEEDED"
    http_status = 429

    def __init__(self, retry_after: int) -> None:
        super().__init__(
            "rate limit exceeded",
            headers={"Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after


# ─── Infrastructure errors ────────────────────────────────────────────────────

class InfrastructureError(CatalogError):
    """Storage, hashing or transport failure. Detail is for logs only."""

    code = "INTERNAL_ERROR"
    http_status = 500

    def __init__(self, detail: str) -> None:
        super().__init__("the server encountered a problem and could not process your request")
        self.detail = detail


class DatabaseError(InfrastructureError):
    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(f"database {operation} failed: {detail}")
        self.operation = operation


class QueryTimeoutError(DatabaseError):
    def __init__(self, operation: str, timeout: float) -> None:
        super().__init__(operation, f"timed out after {timeout:g}s")


class CredentialStoreError(InfrastructureError):
    """The stored password hash could not be used."""


# ─── Programming errors ───────────────────────────────────────────────────────

class ContractViolation(BaseException):
    """An invariant that callers are required to uphold was broken."""
