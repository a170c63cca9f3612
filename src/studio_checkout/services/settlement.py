"""Terminal order transitions and the notifications they trigger."""

import logging
from dataclasses import dataclass

from studio_checkout.adapters.notification_client import NotificationClient
from studio_checkout.domain.errors import InvalidStatusTransitionError
from studio_checkout.domain.orders import Order, OrderStatus
from studio_checkout.domain.payments import (
    IntentStatus,
    NotificationKind,
    PaymentIntent,
)
from studio_checkout.services.orders import OrderRepository

logger = logging.getLogger(__name__)

EXPIRY_REASON = "Payment expired before it was completed"


@dataclass
class SettlementService:
    """Moves orders to terminal statuses exactly once.

    Polling, webhooks and synchronous approvals all settle through here, so a
    notification fires only for the caller whose update performed the
    transition.
    """

    repository: OrderRepository
    notification_client: NotificationClient

    async def apply(self, order: Order, intent: PaymentIntent) -> Order:
        """Reflect a gateway intent status on the order."""
        if intent.status is IntentStatus.APPROVED:
            return await self._transition(
                order, OrderStatus.PAID, None, NotificationKind.ORDER_CONFIRMED
            )
        if intent.status is IntentStatus.REJECTED:
            return await self._transition(
                order,
                OrderStatus.CANCELLED,
                rejection_reason(intent.status_detail),
                NotificationKind.ORDER_FAILED,
            )
        if intent.status is IntentStatus.EXPIRED:
            return await self.expire(order, EXPIRY_REASON)
        return order

    async def expire(self, order: Order, reason: str) -> Order:
        """Mark a pending order as expired."""
        return await self._transition(
            order, OrderStatus.EXPIRED, reason, NotificationKind.ORDER_FAILED
        )

    async def _transition(
        self,
        order: Order,
        status: OrderStatus,
        reason: str | None,
        kind: NotificationKind,
    ) -> Order:
        try:
            transitioned = self.repository.update_status(order.id, status, reason)
        except InvalidStatusTransitionError:
            logger.warning(
                "Ignoring status change for settled order",
                extra={"order_id": str(order.id), "requested": status.value},
            )
            return self.repository.get_order(order.id) or order
        current = self.repository.get_order(order.id) or order
        if transitioned:
            logger.info(
                "Order settled",
                extra={"order_id": str(order.id), "status": status.value},
            )
            await self._notify(kind, current)
        return current

    async def _notify(self, kind: NotificationKind, order: Order) -> None:
        try:
            await self.notification_client.notify(kind, order)
        except Exception:
            logger.exception(
                "Failed to dispatch order notification",
                extra={"order_id": str(order.id), "kind": kind.value},
            )


def rejection_reason(status_detail: str | None) -> str:
    """Return a human-readable reason for a rejected payment."""
    if not status_detail:
        return "Payment was rejected by the gateway"
    return f"Payment was rejected by the gateway ({status_detail})"
