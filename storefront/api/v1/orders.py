# ==============================================================================
# ORDERS ENDPOINTS - Order Routes
# ==============================================================================
# Order placement, customer order history and admin order management
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query, status

from storefront.api.dependencies import (
    AdminUser,
    CurrentUser,
    OrderServiceDep,
    PaginationDep,
)
from storefront.core.constants import SuccessMessages
from storefront.schemas.base import APIResponse, PaginatedResponse
from storefront.schemas.order import (
    ORDER_STATUS_PATTERN,
    OrderAdminUpdate,
    OrderCreate,
    OrderResponse,
    OrderStatusUpdate,
    PaymentResult,
)

router = APIRouter(prefix="/orders", tags=["Orders"])


# ==============================================================================
# CUSTOMER
# ==============================================================================

@router.post(
    "",
    response_model=APIResponse[OrderResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Place order",
    description=(
        "Validate every line against live stock, reserve the stock and "
        "create the order. Nothing is written when any line fails."
    ),
)
async def create_order(
    schema: OrderCreate,
    user: CurrentUser,
    service: OrderServiceDep,
) -> APIResponse[OrderResponse]:
    order = await service.create_order(user, schema)
    return APIResponse.ok(data=order, message=SuccessMessages.ORDER_PLACED)


@router.get(
    "/my",
    response_model=APIResponse[PaginatedResponse[OrderResponse]],
    summary="My orders",
)
async def my_orders(
    user: CurrentUser,
    pagination: PaginationDep,
    service: OrderServiceDep,
    status_filter: Optional[str] = Query(None, alias="status", pattern=ORDER_STATUS_PATTERN),
) -> APIResponse[PaginatedResponse[OrderResponse]]:
    result = await service.list_for_user(
        user["id"],
        pagination.page,
        pagination.page_size,
        status=status_filter,
    )
    return APIResponse.ok(data=result)


@router.get(
    "/{order_id}",
    response_model=APIResponse[OrderResponse],
    summary="Get order",
    description="Order detail for its owner or an administrator.",
)
async def get_order(
    order_id: str,
    user: CurrentUser,
    service: OrderServiceDep,
) -> APIResponse[OrderResponse]:
    return APIResponse.ok(data=await service.get_order(user, order_id))


@router.post(
    "/{order_id}/cancel",
    response_model=APIResponse[OrderResponse],
    summary="Cancel order",
    description="Cancel a pending or processing order and restore its stock.",
)
async def cancel_order(
    order_id: str,
    user: CurrentUser,
    service: OrderServiceDep,
) -> APIResponse[OrderResponse]:
    order = await service.cancel(user, order_id)
    return APIResponse.ok(data=order, message=SuccessMessages.ORDER_CANCELLED)


@router.post(
    "/{order_id}/pay",
    response_model=APIResponse[OrderResponse],
    summary="Mark order as paid",
)
async def pay_order(
    order_id: str,
    user: CurrentUser,
    service: OrderServiceDep,
    payment: Optional[PaymentResult] = None,
) -> APIResponse[OrderResponse]:
    order = await service.mark_paid(user, order_id, payment)
    return APIResponse.ok(data=order, message="Payment recorded")


# ==============================================================================
# ADMINISTRATION
# ==============================================================================

@router.get(
    "",
    response_model=APIResponse[PaginatedResponse[OrderResponse]],
    summary="List orders",
)
async def list_orders(
    admin: AdminUser,
    pagination: PaginationDep,
    service: OrderServiceDep,
    status_filter: Optional[str] = Query(None, alias="status", pattern=ORDER_STATUS_PATTERN),
    user_id: Optional[str] = Query(None),
    order_number: Optional[str] = Query(None, max_length=50, description="Order number substring"),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
) -> APIResponse[PaginatedResponse[OrderResponse]]:
    result = await service.list_orders(
        pagination.page,
        pagination.page_size,
        status=status_filter,
        user_id=user_id,
        order_number=order_number,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return APIResponse.ok(data=result)


@router.patch(
    "/{order_id}/status",
    response_model=APIResponse[OrderResponse],
    summary="Update order status",
    description=(
        "Move an order through its lifecycle. Delivered, cancelled and "
        "refunded orders are final; cancelling or refunding an unshipped "
        "order restores stock."
    ),
)
async def update_order_status(
    order_id: str,
    schema: OrderStatusUpdate,
    admin: AdminUser,
    service: OrderServiceDep,
) -> APIResponse[OrderResponse]:
    order = await service.update_status(order_id, schema.status)
    return APIResponse.ok(data=order, message=SuccessMessages.ORDER_STATUS_UPDATED)


@router.patch(
    "/{order_id}",
    response_model=APIResponse[OrderResponse],
    summary="Update order details",
    description="Edit shipping address, notes or tracking number.",
)
async def update_order(
    order_id: str,
    schema: OrderAdminUpdate,
    admin: AdminUser,
    service: OrderServiceDep,
) -> APIResponse[OrderResponse]:
    order = await service.admin_update(order_id, schema)
    return APIResponse.ok(data=order, message=SuccessMessages.UPDATED)


@router.delete(
    "/{order_id}",
    response_model=APIResponse[dict],
    summary="Delete order",
)
async def delete_order(
    order_id: str,
    admin: AdminUser,
    service: OrderServiceDep,
) -> APIResponse[dict]:
    await service.delete(order_id)
    return APIResponse.ok(message=SuccessMessages.DELETED)
