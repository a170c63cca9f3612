"""Application configuration."""

import os
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict

from studio_checkout.domain.pricing import PricingPolicy

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    mercadopago_access_token: str | None = None
    mercadopago_base_url: str = "https://api.mercadopago.com"
    gateway_timeout_seconds: float = 10.0
    simulated_settlement_seconds: float = 3.0
    poll_interval_seconds: float = 2.0
    reconciliation_max_seconds: float = 900.0
    unit_price: Decimal = Decimal("25.00")
    discount_threshold: int = 10
    discount_rate: Decimal = Decimal("0.20")
    notification_webhook_url: str | None = None
    payment_notification_url: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def pricing_policy(self) -> PricingPolicy:
        """Build the pricing policy from configured values."""
        return PricingPolicy(
            unit_price=self.unit_price,
            discount_threshold=self.discount_threshold,
            discount_rate=self.discount_rate,
        )

    def has_gateway_credentials(self) -> bool:
        """Return True when a real payment gateway token is configured."""
        return bool(
            self.mercadopago_access_token and self.mercadopago_access_token.strip()
        )
