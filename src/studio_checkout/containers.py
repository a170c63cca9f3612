"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from studio_checkout.adapters.notification_client import (
    HttpxNotificationClient,
    LoggingNotificationClient,
    NotificationClient,
)
from studio_checkout.adapters.payment_gateway import (
    MercadoPagoGateway,
    PaymentGateway,
    SimulatedPaymentGateway,
)
from studio_checkout.adapters.supabase_catalog_repository import (
    SupabaseCatalogRepository,
)
from studio_checkout.adapters.supabase_order_repository import SupabaseOrderRepository
from studio_checkout.adapters.supabase_webhook_log_repository import (
    SupabaseWebhookLogRepository,
)
from studio_checkout.config import Settings
from studio_checkout.services.checkout import CheckoutService
from studio_checkout.services.orders import OrderService
from studio_checkout.services.reconciliation import (
    ReconciliationLoop,
    ReconciliationRegistry,
)
from studio_checkout.services.settlement import SettlementService
from studio_checkout.services.webhook_log import WebhookLogService
from studio_checkout.services.webhooks import PaymentWebhookHandler


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    gateway: PaymentGateway
    notification_client: NotificationClient
    order_service: OrderService
    checkout_service: CheckoutService
    payment_webhook_handler: PaymentWebhookHandler
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    order_service = OrderService(SupabaseOrderRepository(supabase_client))
    catalog_repository = SupabaseCatalogRepository(supabase_client)
    webhook_log_service = WebhookLogService(
        SupabaseWebhookLogRepository(supabase_client)
    )

    mercadopago_gateway: MercadoPagoGateway | None = None
    gateway: PaymentGateway
    if resolved_settings.has_gateway_credentials():
        mercadopago_gateway = MercadoPagoGateway.create(
            access_token=resolved_settings.mercadopago_access_token,
            base_url=resolved_settings.mercadopago_base_url,
            timeout=resolved_settings.gateway_timeout_seconds,
            notification_url=resolved_settings.payment_notification_url,
        )
        gateway = mercadopago_gateway
    else:
        gateway = SimulatedPaymentGateway(
            settlement_seconds=resolved_settings.simulated_settlement_seconds
        )

    http_notifier: HttpxNotificationClient | None = None
    notification_client: NotificationClient
    if resolved_settings.notification_webhook_url:
        http_notifier = HttpxNotificationClient.create(
            resolved_settings.notification_webhook_url
        )
        notification_client = http_notifier
    else:
        notification_client = LoggingNotificationClient()

    settlement_service = SettlementService(
        repository=order_service.repository,
        notification_client=notification_client,
    )
    reconciliation_loop = ReconciliationLoop(
        gateway=gateway,
        order_service=order_service,
        settlement_service=settlement_service,
        poll_interval_seconds=resolved_settings.poll_interval_seconds,
        max_duration_seconds=resolved_settings.reconciliation_max_seconds or None,
    )
    checkout_service = CheckoutService(
        catalog_repository=catalog_repository,
        order_service=order_service,
        gateway=gateway,
        settlement_service=settlement_service,
        reconciliations=ReconciliationRegistry(reconciliation_loop),
        pricing_policy=resolved_settings.pricing_policy(),
    )
    payment_webhook_handler = PaymentWebhookHandler(
        checkout_service=checkout_service,
        webhook_log_service=webhook_log_service,
    )

    async def close_resources() -> None:
        if mercadopago_gateway is not None:
            await mercadopago_gateway.close()
        if http_notifier is not None:
            await http_notifier.close()

    return AppContainer(
        settings=resolved_settings,
        gateway=gateway,
        notification_client=notification_client,
        order_service=order_service,
        checkout_service=checkout_service,
        payment_webhook_handler=payment_webhook_handler,
        close_resources=close_resources,
    )
