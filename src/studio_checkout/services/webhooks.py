"""Payment gateway webhook handling."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from studio_checkout.services.checkout import CheckoutService
from studio_checkout.services.webhook_log import WebhookLogService

logger = logging.getLogger(__name__)

ORPHAN_EVENT_TYPE = "mercadopago_payment_orphan"


@dataclass
class PaymentWebhookHandler:
    """Handle Mercado Pago payment notifications."""

    checkout_service: CheckoutService
    webhook_log_service: WebhookLogService

    async def handle(
        self, payload: dict[str, object], query: Mapping[str, str]
    ) -> dict[str, object]:
        """Settle the order referenced by a notification and log the delivery."""
        event_type = _event_type(payload, query)
        intent_id = _payment_id(payload, query)
        if event_type != "payment" or intent_id is None:
            result: dict[str, object] = {"status": "ignored"}
            self.webhook_log_service.record_success(event_type, payload, result)
            return result
        try:
            order = await self.checkout_service.handle_gateway_notification(intent_id)
        except Exception as exc:
            logger.exception(
                "Failed to handle payment webhook", extra={"intent_id": intent_id}
            )
            self.webhook_log_service.record_failure(event_type, payload, str(exc))
            raise
        if order is None:
            result = {"status": "unknown_payment", "payment_id": intent_id}
            self.webhook_log_service.record_success(ORPHAN_EVENT_TYPE, payload, result)
            return result
        result = {
            "status": "ok",
            "order_id": str(order.id),
            "order_status": order.status.value,
        }
        self.webhook_log_service.record_success(event_type, payload, result)
        return result


def _event_type(payload: Mapping[str, object], query: Mapping[str, str]) -> str:
    raw = payload.get("type") or query.get("type") or query.get("topic")
    return str(raw) if raw else "unknown"


def _payment_id(payload: Mapping[str, object], query: Mapping[str, str]) -> str | None:
    data = payload.get("data")
    if isinstance(data, dict) and data.get("id") is not None:
        return str(data["id"])
    raw = query.get("data.id") or query.get("id")
    return str(raw) if raw else None
