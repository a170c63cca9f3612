"""Supabase-backed order repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from studio_checkout.domain.errors import (
    DuplicateIntentError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
)
from studio_checkout.domain.orders import Order, OrderDraft, OrderStatus
from studio_checkout.services.orders import OrderRepository

_UNIQUE_VIOLATION = "23505"
_ORDER_COLUMNS = (
    "id, event_id, client_email, selected_photos, total_amount, status, "
    "payment_intent_id, external_reference, status_reason, created_at"
)


@dataclass
class SupabaseOrderRepository(OrderRepository):
    """Supabase implementation for orders."""

    client: Client

    def create_pending_order(self, draft: OrderDraft) -> Order:
        """Insert a pending order row and return it."""
        try:
            response = (
                self.client.table("orders")
                .insert(
                    {
                        "event_id": str(draft.event_id),
                        "client_email": draft.client_email,
                        "selected_photos": [
                            str(photo_id) for photo_id in draft.selected_photo_ids
                        ],
                        "total_amount": str(draft.total_amount),
                        "status": OrderStatus.PENDING.value,
                        "payment_intent_id": draft.payment_intent_id,
                        "external_reference": draft.external_reference,
                    }
                )
                .execute()
            )
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION and draft.payment_intent_id:
                raise DuplicateIntentError(draft.payment_intent_id) from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to create order")
        return _row_to_order(response.data[0])

    def get_order(self, order_id: UUID) -> Order | None:
        """Return an order by id, if present."""
        response = (
            self.client.table("orders")
            .select(_ORDER_COLUMNS)
            .eq("id", str(order_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_order(response.data[0])

    def find_by_intent_id(self, intent_id: str) -> Order | None:
        """Return the order for a payment intent, if present."""
        response = (
            self.client.table("orders")
            .select(_ORDER_COLUMNS)
            .eq("payment_intent_id", intent_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_order(response.data[0])

    def find_by_external_reference(self, reference: str) -> Order | None:
        """Return the order created for a checkout reference, if present."""
        response = (
            self.client.table("orders")
            .select(_ORDER_COLUMNS)
            .eq("external_reference", reference)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_order(response.data[0])

    def update_status(
        self, order_id: UUID, new_status: OrderStatus, reason: str | None = None
    ) -> bool:
        """Conditionally move a pending order to a terminal status."""
        if not new_status.is_terminal:
            raise InvalidStatusTransitionError(
                f"Cannot move order {order_id} to {new_status}"
            )
        response = (
            self.client.table("orders")
            .update(
                {
                    "status": new_status.value,
                    "status_reason": reason,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", str(order_id))
            .eq("status", OrderStatus.PENDING.value)
            .execute()
        )
        if response.data:
            return True
        current = self.get_order(order_id)
        if current is None:
            raise OrderNotFoundError(f"Order {order_id} not found")
        if current.status == new_status:
            return False
        raise InvalidStatusTransitionError(
            f"Cannot move order {order_id} from {current.status} to {new_status}"
        )

    def list_recent_orders(self, limit: int) -> list[Order]:
        """Return the most recent orders."""
        response = (
            self.client.table("orders")
            .select(_ORDER_COLUMNS)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_row_to_order(row) for row in response.data or []]


def _row_to_order(row: dict[str, object]) -> Order:
    return Order(
        id=UUID(str(row["id"])),
        event_id=UUID(str(row["event_id"])),
        client_email=str(row["client_email"]),
        selected_photo_ids=tuple(
            UUID(str(photo_id)) for photo_id in row.get("selected_photos") or []
        ),
        total_amount=Decimal(str(row["total_amount"])),
        status=OrderStatus(row["status"]),
        payment_intent_id=row.get("payment_intent_id"),
        status_reason=row.get("status_reason"),
        created_at=_parse_timestamp(row.get("created_at")),
        external_reference=row.get("external_reference"),
    )


def _parse_timestamp(value: object) -> datetime:
    if not value:
        return datetime.now(tz=UTC)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
