"""Customer endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status

from customer_orders.api.schemas import (
    CreateCustomerRequest,
    CustomerPage,
    CustomerResponse,
)

if TYPE_CHECKING:
    from customer_orders.containers import AppContainer

router = APIRouter(prefix="/customers", tags=["customers"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_customer(
    payload: CreateCustomerRequest, request: Request
) -> CustomerResponse:
    """Create a customer."""
    container: AppContainer = request.app.state.container
    customer = container.customer_service.create_customer(
        name=payload.name,
        code=payload.code,
        phone=payload.phone,
        email=payload.email,
    )
    return CustomerResponse.model_validate(customer, from_attributes=True)


@router.get("")
async def list_customers(
    request: Request, page: int = 1, limit: int = 10
) -> CustomerPage:
    """Return a page of customers."""
    container: AppContainer = request.app.state.container
    return CustomerPage.from_page(
        container.customer_service.list_customers(page=page, limit=limit)
    )


@router.get("/{customer_id}")
async def get_customer(customer_id: int, request: Request) -> CustomerResponse:
    container: AppContainer = request.app.state.container
    customer = container.customer_service.get_customer(customer_id)
    return CustomerResponse.model_validate(customer, from_attributes=True)
