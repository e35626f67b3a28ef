"""Domain models for outbound notifications."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SmsMessage:
    """A rendered text message addressed to one phone number."""

    to: str
    text: str


@dataclass(frozen=True)
class SmsDeliveryResult:
    """Outcome reported by the SMS gateway for one message."""

    success: bool
    detail: str | None = None
    message_id: str | None = None
