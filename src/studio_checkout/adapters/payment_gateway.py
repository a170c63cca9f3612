"""Payment gateway adapters."""

import asyncio
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol
from uuid import uuid4

import httpx

from studio_checkout.domain.errors import GatewayConfigError, GatewayRequestError
from studio_checkout.domain.payments import IntentStatus, PaymentIntent

SIMULATED_SETTLEMENT_CEILING_SECONDS = 3.0

_APPROVED_STATUSES = {"approved", "authorized"}
_REJECTED_STATUSES = {"rejected", "cancelled", "refunded", "charged_back"}
_EXPIRED_STATUS = "expired"


class PaymentGateway(Protocol):
    """Interface for creating and tracking payment intents."""

    async def create_intent(
        self,
        amount: Decimal,
        description: str,
        payer_email: str,
        external_reference: str | None = None,
        metadata: dict[str, object] | None = None,
    ) -> PaymentIntent:
        """Create a payment intent for the amount.

        ``external_reference`` is echoed back by the gateway on status queries
        and lets a notification be routed to its order.
        """

    async def get_intent_status(self, intent_id: str) -> PaymentIntent:
        """Return the latest state of a payment intent."""


@dataclass
class SimulatedPaymentGateway(PaymentGateway):
    """Gateway used when no real credentials are configured."""

    settlement_seconds: float = SIMULATED_SETTLEMENT_CEILING_SECONDS

    async def create_intent(
        self,
        amount: Decimal,
        description: str,
        payer_email: str,
        external_reference: str | None = None,
        metadata: dict[str, object] | None = None,
    ) -> PaymentIntent:
        """Wait for a simulated settlement and approve."""
        delay = min(self.settlement_seconds, SIMULATED_SETTLEMENT_CEILING_SECONDS)
        if delay > 0:
            await asyncio.sleep(delay)
        intent_id = f"sim_{int(time.time() * 1000)}_{uuid4().hex[:8]}"
        return PaymentIntent(
            intent_id=intent_id,
            status=IntentStatus.APPROVED,
            external_reference=external_reference,
        )

    async def get_intent_status(self, intent_id: str) -> PaymentIntent:
        """Simulated intents are always approved."""
        return PaymentIntent(intent_id=intent_id, status=IntentStatus.APPROVED)


@dataclass
class MercadoPagoGateway(PaymentGateway):
    """Mercado Pago PIX payments over httpx."""

    access_token: str | None
    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10.0
    payment_method_id: str = "pix"
    notification_url: str | None = None

    @classmethod
    def create(
        cls,
        access_token: str | None,
        base_url: str,
        timeout: float = 10.0,
        notification_url: str | None = None,
    ) -> "MercadoPagoGateway":
        """Create a gateway client with a managed httpx session."""
        return cls(
            access_token=access_token,
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
            notification_url=notification_url,
        )

    async def create_intent(
        self,
        amount: Decimal,
        description: str,
        payer_email: str,
        external_reference: str | None = None,
        metadata: dict[str, object] | None = None,
    ) -> PaymentIntent:
        """Create a payment and return its id, status and PIX QR data."""
        payload: dict[str, object] = {
            "transaction_amount": float(amount),
            "description": description,
            "payment_method_id": self.payment_method_id,
            "payer": {"email": payer_email},
        }
        if self.notification_url:
            payload["notification_url"] = self.notification_url
        if external_reference:
            payload["external_reference"] = external_reference
        if metadata:
            payload["metadata"] = metadata
        data = await self._request(
            "POST",
            "/v1/payments",
            json=payload,
            headers={"X-Idempotency-Key": uuid4().hex},
        )
        return _parse_payment(data)

    async def get_intent_status(self, intent_id: str) -> PaymentIntent:
        """Fetch a payment by id."""
        data = await self._request("GET", f"/v1/payments/{intent_id}")
        return _parse_payment(data)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, object] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, object]:
        if not self.access_token or not self.access_token.strip():
            raise GatewayConfigError("Mercado Pago access token is not configured")
        request_headers = {"Authorization": f"Bearer {self.access_token}"}
        if headers:
            request_headers.update(headers)
        try:
            response = await self.http_client.request(
                method,
                f"{self.base_url}{path}",
                json=json,
                headers=request_headers,
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise GatewayRequestError(f"Payment gateway unreachable: {exc}") from exc
        if response.is_error:
            raise GatewayRequestError(
                _error_message(response), status_code=response.status_code
            )
        return response.json()


def map_gateway_status(
    raw_status: str | None, status_detail: str | None = None
) -> IntentStatus:
    """Map a Mercado Pago payment status to an intent status.

    PIX payments that time out are reported as ``cancelled`` with an
    ``expired`` detail; those count as expired, not rejected.
    """
    if raw_status == _EXPIRED_STATUS:
        return IntentStatus.EXPIRED
    if raw_status == "cancelled" and status_detail == _EXPIRED_STATUS:
        return IntentStatus.EXPIRED
    if raw_status in _APPROVED_STATUSES:
        return IntentStatus.APPROVED
    if raw_status in _REJECTED_STATUSES:
        return IntentStatus.REJECTED
    return IntentStatus.PENDING


def _parse_payment(data: dict[str, object]) -> PaymentIntent:
    raw_status = data.get("status")
    transaction_data: dict[str, object] = {}
    point_of_interaction = data.get("point_of_interaction")
    if isinstance(point_of_interaction, dict):
        found = point_of_interaction.get("transaction_data")
        if isinstance(found, dict):
            transaction_data = found
    raw_detail = data.get("status_detail")
    detail = str(raw_detail) if raw_detail else None
    reference = data.get("external_reference")
    intent_id = data.get("id")
    return PaymentIntent(
        intent_id=str(intent_id) if intent_id is not None else None,
        status=map_gateway_status(str(raw_status) if raw_status else None, detail),
        qr_payload=transaction_data.get("qr_code"),
        qr_image=transaction_data.get("qr_code_base64"),
        status_detail=detail,
        external_reference=str(reference) if reference else None,
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if value:
                return str(value)
    return f"Payment gateway returned HTTP {response.status_code}"
