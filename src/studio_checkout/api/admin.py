"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from studio_checkout.api.checkout_models import OrderSummary

if TYPE_CHECKING:
    from studio_checkout.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/orders", dependencies=[Depends(require_admin)])
async def list_orders(request: Request, limit: int = 50) -> dict[str, object]:
    """Return the most recent orders."""
    container: AppContainer = request.app.state.container
    orders = container.order_service.repository.list_recent_orders(limit)
    return {"orders": [OrderSummary.from_order(order) for order in orders]}


@router.get("/orders/{order_id}", dependencies=[Depends(require_admin)])
async def order_detail(order_id: UUID, request: Request) -> OrderSummary:
    """Return a single order."""
    container: AppContainer = request.app.state.container
    return OrderSummary.from_order(container.checkout_service.get_order(order_id))


@router.post("/orders/{order_id}/expire", dependencies=[Depends(require_admin)])
async def expire_order(order_id: UUID, request: Request) -> OrderSummary:
    """Expire a pending order that will not be paid."""
    container: AppContainer = request.app.state.container
    order = await container.checkout_service.expire_order(
        order_id, reason="Expired by operator"
    )
    return OrderSummary.from_order(order)


@router.get("/reconciliations", dependencies=[Depends(require_admin)])
async def list_reconciliations(request: Request) -> dict[str, object]:
    """Return payment intents currently being polled."""
    container: AppContainer = request.app.state.container
    active = container.checkout_service.reconciliations.active_intents()
    return {
        "reconciliations": [
            {"intent_id": intent_id, "order_id": str(order_id)}
            for intent_id, order_id in active.items()
        ]
    }
