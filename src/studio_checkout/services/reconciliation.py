"""Polling reconciliation of pending payment intents."""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import UUID

from studio_checkout.adapters.payment_gateway import PaymentGateway
from studio_checkout.domain.errors import GatewayConfigError, GatewayRequestError
from studio_checkout.domain.orders import OrderDraft, OrderStatus
from studio_checkout.domain.payments import IntentStatus
from studio_checkout.services.orders import OrderService
from studio_checkout.services.settlement import SettlementService

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationLoop:
    """Polls the gateway until an intent settles or the time budget runs out.

    Orders left pending when the budget is exhausted stay pending; the
    webhook or an operator resolves them.
    """

    gateway: PaymentGateway
    order_service: OrderService
    settlement_service: SettlementService
    poll_interval_seconds: float = 2.0
    max_duration_seconds: float | None = 900.0
    clock: Callable[[], float] = time.monotonic

    async def run(self, draft: OrderDraft) -> OrderStatus:
        """Poll until the order reaches a terminal status."""
        intent_id = _require_intent_id(draft)
        started_at = self.clock()
        while True:
            try:
                status = await self.poll_once(draft)
            except Exception:
                logger.exception(
                    "Reconciliation tick failed", extra={"intent_id": intent_id}
                )
                status = OrderStatus.PENDING
            if status.is_terminal:
                return status
            if self._budget_exhausted(started_at):
                logger.warning(
                    "Reconciliation budget exhausted, leaving order pending",
                    extra={"intent_id": intent_id},
                )
                return status
            await asyncio.sleep(self.poll_interval_seconds)

    async def poll_once(self, draft: OrderDraft) -> OrderStatus:
        """Query the gateway once and settle the order if possible."""
        intent_id = _require_intent_id(draft)
        repository = self.order_service.repository
        try:
            intent = await self.gateway.get_intent_status(intent_id)
        except (GatewayConfigError, GatewayRequestError) as exc:
            logger.warning(
                "Gateway status query failed, checking order store",
                extra={"intent_id": intent_id, "error": str(exc)},
            )
            order = repository.find_by_intent_id(intent_id)
            return order.status if order else OrderStatus.PENDING
        if intent.status is IntentStatus.PENDING:
            return OrderStatus.PENDING
        order, _ = self.order_service.create_order_if_absent(draft)
        settled = await self.settlement_service.apply(order, intent)
        return settled.status

    def _budget_exhausted(self, started_at: float) -> bool:
        if not self.max_duration_seconds:
            return False
        return self.clock() - started_at >= self.max_duration_seconds


@dataclass
class ReconciliationRegistry:
    """Tracks one reconciliation task per payment intent."""

    loop: ReconciliationLoop
    _tasks: dict[str, asyncio.Task[OrderStatus]] = field(default_factory=dict)
    _orders: dict[str, UUID] = field(default_factory=dict)

    def start(self, order_id: UUID, draft: OrderDraft) -> asyncio.Task[OrderStatus]:
        """Start polling for the draft's intent unless already running."""
        intent_id = _require_intent_id(draft)
        existing = self._tasks.get(intent_id)
        if existing is not None and not existing.done():
            return existing
        task = asyncio.create_task(
            self.loop.run(draft), name=f"reconcile-{intent_id}"
        )
        self._tasks[intent_id] = task
        self._orders[intent_id] = order_id
        task.add_done_callback(lambda done: self._forget(intent_id, done))
        logger.info(
            "Reconciliation started",
            extra={"intent_id": intent_id, "order_id": str(order_id)},
        )
        return task

    def cancel(self, intent_id: str) -> bool:
        """Stop polling an intent. Returns False when nothing was running."""
        task = self._tasks.pop(intent_id, None)
        self._orders.pop(intent_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.info("Reconciliation cancelled", extra={"intent_id": intent_id})
        return True

    def cancel_for_order(self, order_id: UUID) -> bool:
        """Stop polling for an order's intent."""
        for intent_id, tracked_order_id in list(self._orders.items()):
            if tracked_order_id == order_id:
                return self.cancel(intent_id)
        return False

    def active_intents(self) -> dict[str, UUID]:
        """Return running intents mapped to their order ids."""
        return {
            intent_id: self._orders[intent_id]
            for intent_id, task in self._tasks.items()
            if not task.done() and intent_id in self._orders
        }

    async def close(self) -> None:
        """Cancel all running tasks and wait for them to finish."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        self._orders.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _forget(self, intent_id: str, task: asyncio.Task[OrderStatus]) -> None:
        if self._tasks.get(intent_id) is task:
            self._tasks.pop(intent_id, None)
            self._orders.pop(intent_id, None)


def _require_intent_id(draft: OrderDraft) -> str:
    if not draft.payment_intent_id:
        raise ValueError("Reconciliation requires a payment intent id")
    return draft.payment_intent_id
