"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from studio_checkout.api.admin import router as admin_router
from studio_checkout.api.checkout_models import (
    CheckoutRequest,
    CheckoutResponse,
    CheckoutStatusResponse,
    QuoteRequest,
    QuoteResponse,
)
from studio_checkout.app_logging import configure_logging
from studio_checkout.containers import AppContainer
from studio_checkout.domain.errors import (
    AlbumNotFoundError,
    CheckoutError,
    EmptySelectionError,
    GatewayConfigError,
    GatewayRequestError,
    InvalidContactError,
    InvalidSelectionError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
)

_ERROR_STATUS: dict[type[CheckoutError], int] = {
    EmptySelectionError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidContactError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidSelectionError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    AlbumNotFoundError: status.HTTP_404_NOT_FOUND,
    OrderNotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStatusTransitionError: status.HTTP_409_CONFLICT,
    GatewayConfigError: status.HTTP_503_SERVICE_UNAVAILABLE,
    GatewayRequestError: status.HTTP_502_BAD_GATEWAY,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.checkout_service.reconciliations.close()
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(
        request: Request, exc: CheckoutError
    ) -> JSONResponse:
        status_code = _error_status(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.warning(
                "Checkout failed on payment gateway",
                extra={"path": request.url.path, "error": str(exc)},
            )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/checkout")
    async def start_checkout(
        payload: CheckoutRequest, request: Request
    ) -> CheckoutResponse:
        """Price a selection and start its payment."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.checkout_service.start_checkout(
            album_id=payload.album_id,
            selected_photo_ids=payload.selected_photo_ids,
            client_email=payload.client_email,
        )
        return CheckoutResponse(
            order_id=result.order_id,
            status=result.status.value,
            total_amount=result.total_amount,
            qr_payload=result.qr_payload,
            qr_image=result.qr_image,
        )

    @app.post("/checkout/quote")
    async def quote(payload: QuoteRequest, request: Request) -> QuoteResponse:
        """Return the price breakdown for a selection size."""
        state_container: AppContainer = request.app.state.container
        breakdown = state_container.checkout_service.quote(payload.photo_count)
        return QuoteResponse(
            photo_count=breakdown.photo_count,
            full_price_count=breakdown.full_price_count,
            discounted_count=breakdown.discounted_count,
            subtotal=breakdown.subtotal,
            discount=breakdown.discount,
            total=breakdown.total,
        )

    @app.get("/checkout/{order_id}")
    async def checkout_status(
        order_id: UUID, request: Request
    ) -> CheckoutStatusResponse:
        """Return the current status of an order."""
        state_container: AppContainer = request.app.state.container
        order = state_container.checkout_service.get_order(order_id)
        return CheckoutStatusResponse(
            order_id=order.id,
            status=order.status.value,
            status_reason=order.status_reason,
            total_amount=order.total_amount,
        )

    @app.delete("/checkout/{order_id}/watch")
    async def abandon_checkout(order_id: UUID, request: Request) -> dict[str, object]:
        """Stop polling the gateway for an order."""
        state_container: AppContainer = request.app.state.container
        state_container.checkout_service.get_order(order_id)
        stopped = state_container.checkout_service.abandon_checkout(order_id)
        return {"status": "ok", "stopped": stopped}

    @app.post("/webhooks/mercadopago")
    async def mercadopago_webhook(request: Request) -> dict[str, object]:
        """Handle Mercado Pago payment notifications."""
        state_container: AppContainer = request.app.state.container
        payload = await _json_body(request)
        return await state_container.payment_webhook_handler.handle(
            payload, dict(request.query_params)
        )

    return app


def _error_status(exc: CheckoutError) -> int:
    for error_type, status_code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


async def _json_body(request: Request) -> dict[str, object]:
    body = await request.body()
    if not body:
        return {}
    try:
        parsed = await request.json()
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}
