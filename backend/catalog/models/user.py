"""User model and account validation."""

from sqlalchemy import Boolean, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from catalog.core.errors import ContractViolation
from catalog.core.security.passwords import Password
from catalog.core.validator import EMAIL_RX, Validator, matches, valid_string
from catalog.db.base import Base, CreatedAtMixin, IntIDMixin, VersionMixin


class User(Base, IntIDMixin, CreatedAtMixin, VersionMixin):
    """Registered account. Starts inactive until its activation token is used."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(500), nullable=False)
    email: Mapped[str] = mapped_column(String(500), unique=True, index=True, nullable=False)
    password_hash: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    activated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @property
    def password(self) -> Password:
        return Password(self.password_hash)

    def set_password(self, password: Password) -> None:
        """Adopt the hash of ``password``; the plaintext is dropped."""
        self.password_hash = password.hash
        password.forget_plaintext()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"


def validate_email(v: Validator, email: str | None) -> None:
    v.check(valid_string(email, 1, 500), "email", "must not be empty and less than 500 bytes")
    v.check(email is not None and matches(email, EMAIL_RX), "email", "must be a valid email address")


def validate_password_plaintext(v: Validator, password: str | None) -> None:
    v.check(valid_string(password, 8, 72), "password", "must not be empty and between 8 and 72 bytes")


def validate_user(v: Validator, user: User, password: Password | None = None) -> None:
    v.check(valid_string(user.name, 1, 500), "name", "must not be empty and less than 500 bytes")
    validate_email(v, user.email)
    if password is not None:
        validate_password_plaintext(v, password.plaintext)


def ensure_password_hash(user: User) -> None:
    """A user is never written without a password hash."""
    if not user.password_hash:
        raise ContractViolation(f"missing password hash for user {user.email!r}")
