"""Payment gateway domain models."""

from dataclasses import dataclass
from enum import StrEnum


class IntentStatus(StrEnum):
    """Status of a payment intent as reported by the gateway."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


@dataclass(frozen=True)
class PaymentIntent:
    """Gateway-issued payment request."""

    intent_id: str | None
    status: IntentStatus
    qr_payload: str | None = None
    qr_image: str | None = None
    status_detail: str | None = None
    external_reference: str | None = None


class NotificationKind(StrEnum):
    """Downstream events emitted on terminal order transitions."""

    ORDER_CONFIRMED = "order_confirmed"
    ORDER_FAILED = "order_failed"
