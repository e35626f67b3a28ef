"""Supabase-backed order repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from customer_orders.adapters.supabase_customer_repository import (
    CUSTOMER_COLUMNS,
    parse_customer_row,
    parse_timestamp,
)
from customer_orders.domain.models import OrderRecord
from customer_orders.services.orders import OrderRepository

ORDER_COLUMNS = "id, item, amount, time, customer_id, created_at"
ORDER_WITH_CUSTOMER = f"{ORDER_COLUMNS}, customers({CUSTOMER_COLUMNS})"


@dataclass
class SupabaseOrderRepository(OrderRepository):
    """Supabase implementation for order persistence."""

    client: Client

    def create_order(
        self, item: str, amount: float, time: datetime, customer_id: int
    ) -> OrderRecord:
        """Insert an order row and return it."""
        response = (
            self.client.table("orders")
            .insert(
                {
                    "item": item,
                    "amount": amount,
                    "time": time.isoformat(),
                    "customer_id": customer_id,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create order in Supabase")
        return _parse_row(response.data[0])

    def get_order(self, order_id: int) -> OrderRecord | None:
        """Return an order with its customer, if present."""
        response = (
            self.client.table("orders")
            .select(ORDER_WITH_CUSTOMER)
            .eq("id", order_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_row(response.data[0])
        return None

    def list_orders(
        self, offset: int, limit: int, customer_id: int | None
    ) -> tuple[list[OrderRecord], int]:
        """Return orders ordered by id with the total count."""
        query = self.client.table("orders").select(ORDER_WITH_CUSTOMER, count="exact")
        if customer_id is not None:
            query = query.eq("customer_id", customer_id)
        response = (
            query.order("id", desc=False).range(offset, offset + limit - 1).execute()
        )
        rows = response.data or []
        total = response.count if response.count is not None else len(rows)
        return [_parse_row(row) for row in rows], total


def _parse_row(row: dict[str, object]) -> OrderRecord:
    embedded = row.get("customers")
    time = parse_timestamp(row.get("time"))
    if time is None:
        raise ValueError(f"order {row.get('id')} has no time")
    return OrderRecord(
        id=int(row["id"]),
        item=str(row.get("item", "")),
        amount=float(row.get("amount", 0.0)),
        time=time,
        customer_id=int(row["customer_id"]),
        customer=parse_customer_row(embedded) if isinstance(embedded, dict) else None,
        created_at=parse_timestamp(row.get("created_at")),
    )
