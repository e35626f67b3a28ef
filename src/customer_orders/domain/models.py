"""Domain models for customers and orders."""

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CustomerRecord:
    """Represents a customer stored in the database."""

    id: int
    name: str
    code: str
    phone: str
    email: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class OrderRecord:
    """Represents a persisted order, optionally with its customer embedded."""

    id: int
    item: str
    amount: float
    time: datetime
    customer_id: int
    customer: CustomerRecord | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a listing."""

    items: list[T]
    total: int
    page: int
    limit: int


DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def normalize_paging(page: int | None, limit: int | None) -> tuple[int, int]:
    """Clamp page to >= 1 and limit to 1..MAX_PAGE_SIZE."""
    resolved_page = max(page or 1, 1)
    resolved_limit = min(max(limit or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)
    return resolved_page, resolved_limit
