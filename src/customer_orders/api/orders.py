"""Order endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status

from customer_orders.api.schemas import CreateOrderRequest, OrderPage, OrderResponse

if TYPE_CHECKING:
    from customer_orders.containers import AppContainer

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(payload: CreateOrderRequest, request: Request) -> OrderResponse:
    """Create an order; the SMS confirmation is sent in the background."""
    container: AppContainer = request.app.state.container
    order = await container.order_service.create_order(
        item=payload.item,
        amount=payload.amount,
        time=payload.time,
        customer_id=payload.customer_id,
    )
    return OrderResponse.from_record(order)


@router.get("")
async def list_orders(
    request: Request,
    page: int = 1,
    limit: int = 10,
    customer_id: int | None = None,
) -> OrderPage:
    """Return a page of orders, optionally filtered by customer."""
    container: AppContainer = request.app.state.container
    return OrderPage.from_page(
        container.order_service.list_orders(
            page=page, limit=limit, customer_id=customer_id
        )
    )


@router.get("/{order_id}")
async def get_order(order_id: int, request: Request) -> OrderResponse:
    container: AppContainer = request.app.state.container
    return OrderResponse.from_record(container.order_service.get_order(order_id))
