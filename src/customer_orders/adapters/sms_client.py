"""Africa's Talking SMS client adapter."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from customer_orders.domain.notifications import SmsDeliveryResult

logger = logging.getLogger(__name__)

# Africa's Talking recipient status codes: 101 Sent, 102 Queued.
_ACCEPTED_STATUS_CODES = {101, 102}
_STRIPPED_CHARACTERS = str.maketrans("", "", " -()")


class SmsClient(Protocol):
    """Interface for sending text messages."""

    async def send(self, to: str, text: str) -> SmsDeliveryResult:
        """Send one text message and report the outcome."""


@dataclass
class HttpxSmsClient(SmsClient):
    """SMS client for the Africa's Talking messaging API, built on httpx."""

    username: str
    api_key: str
    sender_id: str | None
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, username: str, api_key: str, sender_id: str | None, base_url: str
    ) -> "HttpxSmsClient":
        """Create an SMS client with a managed httpx session."""
        return cls(
            username=username,
            api_key=api_key,
            sender_id=sender_id,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
        )

    async def send(self, to: str, text: str) -> SmsDeliveryResult:
        """Send a message using the messaging endpoint."""
        data = {
            "username": self.username,
            "to": format_phone_number(to),
            "message": text,
        }
        if self.sender_id:
            data["from"] = self.sender_id
        try:
            response = await self.http_client.post(
                self.base_url,
                data=data,
                headers={"Accept": "application/json", "apikey": self.api_key},
                timeout=10,
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            return SmsDeliveryResult(success=False, detail=f"{type(exc).__name__}: {exc}")
        logger.debug("SMS API response", extra={"payload": payload})
        return _parse_delivery(payload)

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()


def format_phone_number(phone: str) -> str:
    """Normalise a Kenyan phone number to international format."""
    cleaned = phone.translate(_STRIPPED_CHARACTERS)
    if cleaned.startswith("0"):
        cleaned = "+254" + cleaned[1:]
    if not cleaned.startswith("+"):
        cleaned = "+254" + cleaned
    return cleaned


def _parse_delivery(payload: object) -> SmsDeliveryResult:
    data = payload.get("SMSMessageData") if isinstance(payload, dict) else None
    recipients = data.get("Recipients") if isinstance(data, dict) else None
    if not recipients:
        return SmsDeliveryResult(success=False, detail="no recipients in response")
    recipient = recipients[0]
    status_code = recipient.get("statusCode")
    if status_code not in _ACCEPTED_STATUS_CODES:
        return SmsDeliveryResult(
            success=False,
            detail=f"{recipient.get('status')} (code: {status_code})",
        )
    return SmsDeliveryResult(
        success=True,
        detail=recipient.get("status"),
        message_id=recipient.get("messageId"),
    )
