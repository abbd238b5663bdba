"""Field-check accumulator and reusable validation predicates."""

from __future__ import annotations

import re
from collections.abc import Hashable, Iterable, Sequence
from typing import Any

from catalog.core.errors import ValidationFailedError

EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


class Validator:
    """Collects at most one error message per field.

    One instance covers one validation pass; create a fresh one per request.
    """

    def __init__(self) -> None:
        self.errors: dict[str, str] = {}

    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        """Record ``message`` for ``key`` unless the key already has an error."""
        self.errors.setdefault(key, message)

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)

    def raise_if_invalid(self) -> None:
        if self.errors:
            raise ValidationFailedError(self.errors)


def valid_string(value: str | None, min_bytes: int = 1, max_bytes: int = 500) -> bool:
    """Non-blank string whose UTF-8 length lies within ``[min_bytes, max_bytes]``."""
    if value is None or not value.strip():
        return False
    size = len(value.encode("utf-8"))
    return min_bytes <= size <= max_bytes


def within_range(value: Any, low: Any, high: Any) -> bool:
    return value is not None and low <= value <= high


def permitted_value(value: Any, *permitted: Any) -> bool:
    return value in permitted


def matches(value: str, pattern: re.Pattern[str]) -> bool:
    return pattern.match(value) is not None


def unique(values: Sequence[Hashable] | None) -> bool:
    """True when every element is distinct and no string element is blank."""
    if values is None:
        return False
    for value in values:
        if isinstance(value, str) and not valid_string(value):
            return False
    return len(set(values)) == len(values)


def first_error_per_field(pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Fold (field, message) pairs into a map keeping the first message per field."""
    v = Validator()
    for key, message in pairs:
        v.add_error(key, message)
    return v.errors
