"""Order persistence interface and helpers."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from studio_checkout.domain.errors import DuplicateIntentError
from studio_checkout.domain.orders import Order, OrderDraft, OrderStatus

logger = logging.getLogger(__name__)


class OrderRepository(Protocol):
    """Persistence interface for orders."""

    def create_pending_order(self, draft: OrderDraft) -> Order:
        """Insert a pending order.

        Raises DuplicateIntentError when an order already exists for the
        draft's non-null payment intent id.
        """

    def get_order(self, order_id: UUID) -> Order | None:
        """Return an order by id, if present."""

    def find_by_intent_id(self, intent_id: str) -> Order | None:
        """Return the order for a payment intent, if present."""

    def find_by_external_reference(self, reference: str) -> Order | None:
        """Return the order created for a checkout reference, if present."""

    def update_status(
        self, order_id: UUID, new_status: OrderStatus, reason: str | None = None
    ) -> bool:
        """Move a pending order to a terminal status.

        Returns True when this call performed the transition and False when
        the order already had ``new_status``. Moving to ``pending`` or out of
        a terminal status raises InvalidStatusTransitionError.
        """

    def list_recent_orders(self, limit: int) -> list[Order]:
        """Return the most recent orders."""


@dataclass
class OrderService:
    """Idempotent order creation on top of the repository."""

    repository: OrderRepository

    def create_order_if_absent(self, draft: OrderDraft) -> tuple[Order, bool]:
        """Create the order or return the existing one for the same intent.

        The flag is True when a new row was written.
        """
        try:
            return self.repository.create_pending_order(draft), True
        except DuplicateIntentError:
            if draft.payment_intent_id is None:
                raise
            existing = self.repository.find_by_intent_id(draft.payment_intent_id)
            if existing is None:
                raise
            logger.info(
                "Order already exists for intent, resuming",
                extra={"intent_id": draft.payment_intent_id},
            )
            return existing, False
