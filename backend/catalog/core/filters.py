"""Pagination and sorting parameters for list queries."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field

from catalog.core.errors import ContractViolation
from catalog.core.validator import Validator, permitted_value, within_range

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100


@dataclass
class Filters:
    """Page, page size and a sort key restricted to ``sort_safelist``.

    A leading ``-`` on the sort key means descending order.
    """

    page: int = 1
    page_size: int = 20
    sort: str = "id"
    sort_safelist: tuple[str, ...] = field(default_factory=tuple)

    def sort_column(self) -> str:
        if self.sort not in self.sort_safelist:
            raise ContractViolation(f"unsafe sort parameter: {self.sort!r}")
        return self.sort.lstrip("-")

    def sort_descending(self) -> bool:
        return self.sort.startswith("-")

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def validate_filters(v: Validator, f: Filters) -> None:
    v.check(within_range(f.page, 1, MAX_PAGE), "page", "must be between 1 and 10 million")
    v.check(within_range(f.page_size, 1, MAX_PAGE_SIZE), "page_size", "must be between 1 and 100")
    v.check(permitted_value(f.sort, *f.sort_safelist), "sort", "invalid sort value")


@dataclass(frozen=True)
class Metadata:
    """Pagination results; every field is ``None`` when the page was empty."""

    current_page: int | None = None
    page_size: int | None = None
    first_page: int | None = None
    last_page: int | None = None
    total_records: int | None = None

    def to_dict(self) -> dict[str, int]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    if total_records == 0:
        return Metadata()
    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=math.ceil(total_records / page_size),
        total_records=total_records,
    )
