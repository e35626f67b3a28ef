"""Supabase-backed customer repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from customer_orders.domain.models import CustomerRecord
from customer_orders.services.customers import CustomerRepository

CUSTOMER_COLUMNS = "id, name, code, phone, email, created_at"


@dataclass
class SupabaseCustomerRepository(CustomerRepository):
    """Supabase implementation for customer persistence."""

    client: Client

    def get_customer(self, customer_id: int) -> CustomerRecord | None:
        """Return the customer for an id, if present."""
        response = (
            self.client.table("customers")
            .select(CUSTOMER_COLUMNS)
            .eq("id", customer_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return parse_customer_row(response.data[0])
        return None

    def get_by_code(self, code: str) -> CustomerRecord | None:
        """Return the customer for a business code, if present."""
        response = (
            self.client.table("customers")
            .select(CUSTOMER_COLUMNS)
            .eq("code", code)
            .limit(1)
            .execute()
        )
        if response.data:
            return parse_customer_row(response.data[0])
        return None

    def create_customer(
        self, name: str, code: str, phone: str, email: str | None
    ) -> CustomerRecord:
        """Insert a customer row and return it."""
        response = (
            self.client.table("customers")
            .insert({"name": name, "code": code, "phone": phone, "email": email})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create customer in Supabase")
        return parse_customer_row(response.data[0])

    def list_customers(
        self, offset: int, limit: int
    ) -> tuple[list[CustomerRecord], int]:
        """Return customers ordered by id with the total count."""
        response = (
            self.client.table("customers")
            .select(CUSTOMER_COLUMNS, count="exact")
            .order("id", desc=False)
            .range(offset, offset + limit - 1)
            .execute()
        )
        rows = response.data or []
        total = response.count if response.count is not None else len(rows)
        return [parse_customer_row(row) for row in rows], total


def parse_customer_row(row: dict[str, object]) -> CustomerRecord:
    """Convert a customers row into a record."""
    email = row.get("email")
    return CustomerRecord(
        id=int(row["id"]),
        name=str(row.get("name", "")),
        code=str(row.get("code", "")),
        phone=str(row.get("phone", "")),
        email=str(email) if email else None,
        created_at=parse_timestamp(row.get("created_at")),
    )


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO timestamp column, tolerating nulls."""
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None
