"""Request and response models for the checkout API."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from studio_checkout.domain.orders import Order


class CheckoutRequest(BaseModel):
    """Client selection submitted for payment."""

    album_id: UUID
    selected_photo_ids: list[UUID]
    client_email: str


class CheckoutResponse(BaseModel):
    """Result of starting a checkout."""

    order_id: UUID
    status: str
    total_amount: Decimal
    qr_payload: str | None = None
    qr_image: str | None = None


class CheckoutStatusResponse(BaseModel):
    """Current state of an order."""

    order_id: UUID
    status: str
    status_reason: str | None = None
    total_amount: Decimal


class QuoteRequest(BaseModel):
    """Number of photos to price."""

    photo_count: int = Field(ge=0)


class QuoteResponse(BaseModel):
    """Price breakdown for a selection size."""

    photo_count: int
    full_price_count: int
    discounted_count: int
    subtotal: Decimal
    discount: Decimal
    total: Decimal


class OrderSummary(BaseModel):
    """Admin view of an order."""

    id: UUID
    event_id: UUID
    client_email: str
    selected_photo_ids: list[UUID]
    total_amount: Decimal
    status: str
    status_reason: str | None
    payment_intent_id: str | None
    created_at: str

    @classmethod
    def from_order(cls, order: Order) -> "OrderSummary":
        return cls(
            id=order.id,
            event_id=order.event_id,
            client_email=order.client_email,
            selected_photo_ids=list(order.selected_photo_ids),
            total_amount=order.total_amount,
            status=order.status.value,
            status_reason=order.status_reason,
            payment_intent_id=order.payment_intent_id,
            created_at=order.created_at.isoformat(),
        )
