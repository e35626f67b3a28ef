"""Order workflows."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Protocol

from customer_orders.domain.models import (
    CustomerRecord,
    OrderRecord,
    Page,
    normalize_paging,
)
from customer_orders.errors import (
    CustomerNotFound,
    InvalidRequest,
    OrderNotFound,
    PersistenceError,
)
from customer_orders.services.background import BackgroundDispatcher
from customer_orders.services.customers import CustomerRepository
from customer_orders.services.notifications import OrderNotifier
from customer_orders.services.tokens import utcnow

logger = logging.getLogger(__name__)


class OrderRepository(Protocol):
    """Persistence interface for orders."""

    def create_order(
        self, item: str, amount: float, time: datetime, customer_id: int
    ) -> OrderRecord:
        """Create an order row and return it."""

    def get_order(self, order_id: int) -> OrderRecord | None:
        """Return an order with its customer embedded, if present."""

    def list_orders(
        self, offset: int, limit: int, customer_id: int | None
    ) -> tuple[list[OrderRecord], int]:
        """Return one slice of orders and the total count."""


@dataclass
class OrderService:
    """Create and read orders.

    Order creation checks the customer before writing and hands the SMS
    confirmation to the background dispatcher, so the caller never waits
    on, or sees the outcome of, the notification.
    """

    customer_repository: CustomerRepository
    order_repository: OrderRepository
    notifier: OrderNotifier
    dispatcher: BackgroundDispatcher
    clock: Callable[[], datetime] = field(default=utcnow)

    async def create_order(
        self,
        item: str | None,
        amount: float | None,
        time: datetime | None,
        customer_id: int | None,
    ) -> OrderRecord:
        """Validate, persist and announce a new order."""
        item = (item or "").strip()
        if not item:
            raise InvalidRequest("item is required")
        if amount is None or not math.isfinite(amount) or amount < 0:
            raise InvalidRequest("amount must be a non-negative number")
        if customer_id is None or customer_id <= 0:
            raise InvalidRequest("customer_id is required")

        customer = self._find_customer(customer_id)
        try:
            order = self.order_repository.create_order(
                item=item,
                amount=amount,
                time=time or self.clock(),
                customer_id=customer.id,
            )
        except Exception as exc:
            logger.exception("Failed to create order", extra={"customer_id": customer_id})
            raise PersistenceError("failed to create order") from exc

        order = replace(order, customer=customer)
        self.dispatcher.spawn(
            self.notifier.notify_order_created(customer, order),
            name=f"order-sms-{order.id}",
        )
        return order

    def get_order(self, order_id: int) -> OrderRecord:
        """Return an order or raise OrderNotFound."""
        try:
            order = self.order_repository.get_order(order_id)
        except Exception as exc:
            logger.exception("Failed to load order", extra={"order_id": order_id})
            raise PersistenceError("failed to retrieve order") from exc
        if order is None:
            raise OrderNotFound(f"order {order_id} not found")
        return order

    def list_orders(
        self,
        page: int | None = None,
        limit: int | None = None,
        customer_id: int | None = None,
    ) -> Page[OrderRecord]:
        """Return a page of orders, optionally for one customer."""
        page, limit = normalize_paging(page, limit)
        try:
            items, total = self.order_repository.list_orders(
                (page - 1) * limit, limit, customer_id
            )
        except Exception as exc:
            logger.exception("Failed to list orders")
            raise PersistenceError("failed to retrieve orders") from exc
        return Page(items=items, total=total, page=page, limit=limit)

    def _find_customer(self, customer_id: int) -> CustomerRecord:
        try:
            customer = self.customer_repository.get_customer(customer_id)
        except Exception as exc:
            logger.exception(
                "Failed to verify customer", extra={"customer_id": customer_id}
            )
            raise PersistenceError("failed to verify customer") from exc
        if customer is None:
            raise CustomerNotFound(f"customer {customer_id} not found")
        return customer
