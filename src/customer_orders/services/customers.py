"""Customer-related business logic."""

import logging
from dataclasses import dataclass
from typing import Protocol

from customer_orders.domain.models import CustomerRecord, Page, normalize_paging
from customer_orders.errors import (
    CustomerExists,
    CustomerNotFound,
    InvalidRequest,
    PersistenceError,
)

logger = logging.getLogger(__name__)


class CustomerRepository(Protocol):
    """Persistence interface for customers."""

    def get_customer(self, customer_id: int) -> CustomerRecord | None:
        """Return the customer with the given id, if present."""

    def get_by_code(self, code: str) -> CustomerRecord | None:
        """Return the customer with the given business code, if present."""

    def create_customer(
        self, name: str, code: str, phone: str, email: str | None
    ) -> CustomerRecord:
        """Create and return a new customer."""

    def list_customers(
        self, offset: int, limit: int
    ) -> tuple[list[CustomerRecord], int]:
        """Return one slice of customers and the total count."""


@dataclass
class CustomerService:
    """Application service for customers."""

    repository: CustomerRepository

    def create_customer(
        self, name: str, code: str, phone: str, email: str | None = None
    ) -> CustomerRecord:
        """Create a customer with a unique business code."""
        name, code, phone = name.strip(), code.strip(), phone.strip()
        if not name or not code or not phone:
            raise InvalidRequest("name, code and phone are required")
        try:
            existing = self.repository.get_by_code(code)
        except Exception as exc:
            logger.exception("Failed to look up customer", extra={"code": code})
            raise PersistenceError("failed to verify customer code") from exc
        if existing is not None:
            raise CustomerExists(f"customer with code {code} already exists")
        try:
            return self.repository.create_customer(name, code, phone, email or None)
        except Exception as exc:
            logger.exception("Failed to create customer", extra={"code": code})
            raise PersistenceError("failed to create customer") from exc

    def get_customer(self, customer_id: int) -> CustomerRecord:
        """Return a customer or raise CustomerNotFound."""
        try:
            customer = self.repository.get_customer(customer_id)
        except Exception as exc:
            logger.exception(
                "Failed to load customer", extra={"customer_id": customer_id}
            )
            raise PersistenceError("failed to retrieve customer") from exc
        if customer is None:
            raise CustomerNotFound(f"customer {customer_id} not found")
        return customer

    def list_customers(
        self, page: int | None = None, limit: int | None = None
    ) -> Page[CustomerRecord]:
        """Return a page of customers."""
        page, limit = normalize_paging(page, limit)
        try:
            items, total = self.repository.list_customers((page - 1) * limit, limit)
        except Exception as exc:
            logger.exception("Failed to list customers")
            raise PersistenceError("failed to retrieve customers") from exc
        return Page(items=items, total=total, page=page, limit=limit)
