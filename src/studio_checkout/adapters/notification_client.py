"""Order notification dispatch."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from studio_checkout.domain.orders import Order
from studio_checkout.domain.payments import NotificationKind

logger = logging.getLogger(__name__)


class NotificationClient(Protocol):
    """Interface for order confirmation and failure events."""

    async def notify(self, kind: NotificationKind, order: Order) -> None:
        """Dispatch a notification about an order."""


@dataclass
class LoggingNotificationClient(NotificationClient):
    """Notification client that only logs events."""

    async def notify(self, kind: NotificationKind, order: Order) -> None:
        """Log the event."""
        logger.info(
            "Order notification",
            extra={"kind": kind.value, "order_id": str(order.id)},
        )


@dataclass
class HttpxNotificationClient(NotificationClient):
    """Posts order events to a webhook URL."""

    url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str) -> "HttpxNotificationClient":
        """Create a notification client with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def notify(self, kind: NotificationKind, order: Order) -> None:
        """Send the event as JSON."""
        response = await self.http_client.post(
            self.url, json=_event_payload(kind, order), timeout=10
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _event_payload(kind: NotificationKind, order: Order) -> dict[str, object]:
    return {
        "kind": kind.value,
        "order": {
            "id": str(order.id),
            "event_id": str(order.event_id),
            "client_email": order.client_email,
            "selected_photo_ids": [str(pid) for pid in order.selected_photo_ids],
            "total_amount": str(order.total_amount),
            "status": order.status.value,
            "status_reason": order.status_reason,
            "payment_intent_id": order.payment_intent_id,
        },
    }
