"""Domain models for checkout orders."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from uuid import UUID


class OrderStatus(StrEnum):
    """Lifecycle status of a persisted order."""

    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


@dataclass(frozen=True)
class CheckoutSession:
    """A validated, priced checkout attempt."""

    album_id: UUID
    event_id: UUID
    selected_photo_ids: tuple[UUID, ...]
    client_email: str
    total_amount: Decimal
    created_at: datetime
    reference: str | None = None


@dataclass(frozen=True)
class OrderDraft:
    """Order fields before persistence."""

    event_id: UUID
    client_email: str
    selected_photo_ids: tuple[UUID, ...]
    total_amount: Decimal
    payment_intent_id: str | None
    external_reference: str | None = None


@dataclass(frozen=True)
class Order:
    """Durable record of a checkout outcome."""

    id: UUID
    event_id: UUID
    client_email: str
    selected_photo_ids: tuple[UUID, ...]
    total_amount: Decimal
    status: OrderStatus
    payment_intent_id: str | None
    status_reason: str | None
    created_at: datetime
    external_reference: str | None = None


@dataclass(frozen=True)
class CheckoutResult:
    """Outcome returned to the caller of a checkout."""

    order_id: UUID
    status: OrderStatus
    total_amount: Decimal
    qr_payload: str | None = None
    qr_image: str | None = None
