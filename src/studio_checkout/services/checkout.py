"""Checkout orchestration from photo selection to settled order."""

import logging
import re
import time
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from studio_checkout.adapters.payment_gateway import PaymentGateway
from studio_checkout.domain.errors import (
    AlbumNotFoundError,
    EmptySelectionError,
    InvalidContactError,
    InvalidSelectionError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
)
from studio_checkout.domain.orders import (
    CheckoutResult,
    CheckoutSession,
    Order,
    OrderDraft,
    OrderStatus,
)
from studio_checkout.domain.payments import IntentStatus, PaymentIntent
from studio_checkout.domain.pricing import PriceQuote, PricingPolicy
from studio_checkout.services.catalog import CatalogRepository
from studio_checkout.services.orders import OrderService
from studio_checkout.services.pricing import price, quote_count
from studio_checkout.services.reconciliation import ReconciliationRegistry
from studio_checkout.services.settlement import SettlementService

logger = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
FREE_INTENT_PREFIX = "free_"
SIMULATED_INTENT_PREFIX = "sim_"
CHECKOUT_REFERENCE_PREFIX = "checkout_"


@dataclass
class CheckoutService:
    """Prices selections, starts payments and tracks orders to completion."""

    catalog_repository: CatalogRepository
    order_service: OrderService
    gateway: PaymentGateway
    settlement_service: SettlementService
    reconciliations: ReconciliationRegistry
    pricing_policy: PricingPolicy

    def prepare_session(
        self, album_id: UUID, selected_photo_ids: Sequence[UUID], client_email: str
    ) -> CheckoutSession:
        """Validate a selection and price it."""
        photo_ids = tuple(dict.fromkeys(selected_photo_ids))
        if not photo_ids:
            raise EmptySelectionError("Select at least one photo")
        email = client_email.strip()
        if not _EMAIL_PATTERN.match(email):
            raise InvalidContactError(f"Invalid e-mail address: {client_email!r}")
        album = self.catalog_repository.get_album(album_id)
        if album is None:
            raise AlbumNotFoundError(f"Album {album_id} not found")
        found = {
            photo.id
            for photo in self.catalog_repository.list_album_photos(
                album_id, list(photo_ids)
            )
        }
        missing = [photo_id for photo_id in photo_ids if photo_id not in found]
        if missing:
            raise InvalidSelectionError(
                f"{len(missing)} selected photo(s) do not belong to album {album_id}"
            )
        return CheckoutSession(
            album_id=album_id,
            event_id=album.event_id,
            selected_photo_ids=photo_ids,
            client_email=email,
            total_amount=price(photo_ids, self.pricing_policy),
            created_at=datetime.now(tz=UTC),
            reference=checkout_reference(),
        )

    async def start_checkout(
        self, album_id: UUID, selected_photo_ids: Sequence[UUID], client_email: str
    ) -> CheckoutResult:
        """Run a checkout up to the point where payment is awaited or settled."""
        session = self.prepare_session(album_id, selected_photo_ids, client_email)
        intent = await self._create_intent(session)
        draft = OrderDraft(
            event_id=session.event_id,
            client_email=session.client_email,
            selected_photo_ids=session.selected_photo_ids,
            total_amount=session.total_amount,
            payment_intent_id=intent.intent_id,
            external_reference=session.reference,
        )
        order, created = self.order_service.create_order_if_absent(draft)
        if not created:
            logger.info(
                "Checkout resumed existing order",
                extra={"order_id": str(order.id), "intent_id": intent.intent_id},
            )
        if not order.status.is_terminal:
            if intent.status is not IntentStatus.PENDING:
                order = await self.settlement_service.apply(order, intent)
            elif needs_reconciliation(intent.intent_id):
                self.reconciliations.start(order.id, draft)
        return CheckoutResult(
            order_id=order.id,
            status=order.status,
            total_amount=order.total_amount,
            qr_payload=intent.qr_payload,
            qr_image=intent.qr_image,
        )

    def quote(self, photo_count: int) -> PriceQuote:
        """Return the price breakdown for a number of photos."""
        return quote_count(photo_count, self.pricing_policy)

    def get_order(self, order_id: UUID) -> Order:
        """Return an order or raise OrderNotFoundError."""
        order = self.order_service.repository.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")
        return order

    def get_checkout_status(self, order_id: UUID) -> OrderStatus:
        """Return the current status of an order."""
        return self.get_order(order_id).status

    def abandon_checkout(self, order_id: UUID) -> bool:
        """Stop polling for an order whose client went away."""
        return self.reconciliations.cancel_for_order(order_id)

    async def expire_order(self, order_id: UUID, reason: str) -> Order:
        """Expire a pending order and stop polling for it."""
        order = self.get_order(order_id)
        if order.status.is_terminal and order.status is not OrderStatus.EXPIRED:
            raise InvalidStatusTransitionError(
                f"Order {order_id} is already {order.status.value}"
            )
        self.reconciliations.cancel_for_order(order_id)
        expired = await self.settlement_service.expire(order, reason)
        if expired.status is not OrderStatus.EXPIRED:
            raise InvalidStatusTransitionError(
                f"Order {order_id} settled as {expired.status.value} before expiring"
            )
        return expired

    async def handle_gateway_notification(self, intent_id: str) -> Order | None:
        """Refresh an order after the gateway reports a change.

        Orders are matched by intent id first and then by the external
        reference the gateway echoes back. Returns None when neither matches.
        """
        repository = self.order_service.repository
        order = repository.find_by_intent_id(intent_id)
        if order is not None and order.status.is_terminal:
            return order
        intent = await self.gateway.get_intent_status(intent_id)
        if order is None and intent.external_reference:
            order = repository.find_by_external_reference(intent.external_reference)
            if order is not None:
                logger.info(
                    "Matched notified intent by external reference",
                    extra={
                        "intent_id": intent_id,
                        "order_id": str(order.id),
                        "external_reference": intent.external_reference,
                    },
                )
        if order is None:
            logger.info("No order for notified intent", extra={"intent_id": intent_id})
            return None
        if order.status.is_terminal:
            return order
        settled = await self.settlement_service.apply(order, intent)
        if settled.status.is_terminal:
            self.reconciliations.cancel_for_order(settled.id)
        return settled

    async def _create_intent(self, session: CheckoutSession) -> PaymentIntent:
        if session.total_amount == Decimal(0):
            return PaymentIntent(
                intent_id=free_intent_id(),
                status=IntentStatus.APPROVED,
                status_detail="included",
            )
        count = len(session.selected_photo_ids)
        return await self.gateway.create_intent(
            amount=session.total_amount,
            description=f"Selected photos - {count} photo{'s' if count > 1 else ''}",
            payer_email=session.client_email,
            external_reference=session.reference,
            metadata=payment_metadata(session),
        )


def payment_metadata(session: CheckoutSession) -> dict[str, object]:
    """Return the order details attached to a gateway payment."""
    return {
        "selected_photos": ",".join(str(pid) for pid in session.selected_photo_ids),
        "event_id": str(session.event_id),
        "client_email": session.client_email,
        "photo_count": len(session.selected_photo_ids),
    }


def checkout_reference() -> str:
    """Return a reference that ties a gateway payment back to its order."""
    return f"{CHECKOUT_REFERENCE_PREFIX}{uuid4().hex}"


def free_intent_id() -> str:
    """Return a synthetic intent id for selections that need no payment."""
    return f"{FREE_INTENT_PREFIX}{int(time.time() * 1000)}_{uuid4().hex[:8]}"


def needs_reconciliation(intent_id: str | None) -> bool:
    """Return True for real gateway intents that can be polled."""
    if not intent_id:
        return False
    return not intent_id.startswith((FREE_INTENT_PREFIX, SIMULATED_INTENT_PREFIX))
