"""Order notifications sent by SMS."""

import logging
from dataclasses import dataclass

from customer_orders.adapters.sms_client import SmsClient
from customer_orders.domain.models import CustomerRecord, OrderRecord
from customer_orders.domain.notifications import SmsMessage

logger = logging.getLogger(__name__)


def render_order_message(customer: CustomerRecord, order: OrderRecord) -> SmsMessage:
    """Render the order confirmation text for a customer."""
    text = (
        f"Hi {customer.name}, your order for {order.item} "
        f"(Amount: KSH {order.amount:.2f}) has been received. "
        f"Order Time: {order.time:%Y-%m-%d %H:%M:%S}. "
        "Thank you for your business!"
    )
    return SmsMessage(to=customer.phone, text=text)


@dataclass
class OrderNotifier:
    """Send a single, best-effort SMS for a newly created order."""

    sms_client: SmsClient

    async def notify_order_created(
        self, customer: CustomerRecord, order: OrderRecord
    ) -> None:
        """Deliver the confirmation once; log and discard any failure."""
        message = render_order_message(customer, order)
        try:
            result = await self.sms_client.send(message.to, message.text)
        except Exception:
            logger.exception(
                "Failed to send order SMS",
                extra={"order_id": order.id, "customer_id": customer.id},
            )
            return
        if not result.success:
            logger.warning(
                "Order SMS was not delivered: %s",
                result.detail,
                extra={"order_id": order.id, "customer_id": customer.id},
            )
            return
        logger.info(
            "Order SMS sent",
            extra={"order_id": order.id, "customer_id": customer.id},
        )
