# ==============================================================================
# ORDER SERVICE - Order Workflow
# ==============================================================================
# Order placement with stock reservation, status lifecycle, payment marking
# ==============================================================================

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from storefront.core.constants import ErrorMessages, OrderConstants, ProductConstants, UserRoles
from storefront.core.exceptions import (
    AuthorizationError,
    BadRequestError,
    BusinessRuleError,
    InsufficientStockError,
    InvalidTransitionError,
    ProductNotFoundError,
)
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.repositories import (
    CartRepository,
    OrderRepository,
    ProductRepository,
    Record,
)
from storefront.schemas.order import (
    OrderAdminUpdate,
    OrderCreate,
    OrderResponse,
    PaymentResult,
)
from storefront.services.base_service import BaseService
from storefront.services.product_service import check_variant_selection, effective_price
from storefront.services.shipping import ShippingPolicy, get_shipping_policy
from storefront.utils.helpers import quantize_money, utc_now

logger = logging.getLogger(__name__)

ORDER_SORT_FIELDS = frozenset({"created_at", "total_price", "status", "order_number"})


def generate_order_number(user_id: str, now: Optional[datetime] = None) -> str:
    """
    Human-readable order number: ``ORD-<epoch ms>-<last 4 of user id>``.

    Example:
        >>> generate_order_number("5f1c2a7e")
        'ORD-1718000000000-2A7E'
    """
    moment = now or utc_now()
    suffix = str(user_id)[-OrderConstants.USER_SUFFIX_LENGTH:].upper()
    return f"{OrderConstants.NUMBER_PREFIX}-{int(moment.timestamp() * 1000)}-{suffix}"


def check_transition(current: str, target: str) -> bool:
    """
    Validate a status change.

    Returns:
        False when ``target`` equals ``current`` (nothing to write)

    Raises:
        InvalidTransitionError: If the move is not allowed
    """
    if target == current:
        return False
    if current in OrderConstants.TERMINAL_STATUSES:
        raise InvalidTransitionError(current, target)
    if target not in OrderConstants.TRANSITIONS.get(current, frozenset()):
        raise InvalidTransitionError(current, target)
    return True


def _is_admin(user: Record) -> bool:
    return user.get("role") == UserRoles.ADMIN


class OrderService(BaseService[OrderResponse]):
    """
    Order service.

    Placement validates every line before writing anything, then
    reserves stock with one guarded update per product. A failed
    reservation or insert releases the reservations already taken.
    """

    _resource_name = "order"

    def __init__(
        self,
        adapter: BaseDatabaseAdapter,
        shipping_policy: Optional[ShippingPolicy] = None,
    ) -> None:
        self._orders = OrderRepository(adapter)
        self._products = ProductRepository(adapter)
        self._carts = CartRepository(adapter)
        self._shipping = shipping_policy or get_shipping_policy()
        super().__init__(adapter, self._orders)

    def _to_response(self, record: Record) -> OrderResponse:
        return OrderResponse.model_validate(record)

    async def _get_for(self, user: Record, order_id: str) -> Record:
        """
        Load an order the caller may see.

        Raises:
            NotFoundError: If order missing
            AuthorizationError: If the caller is neither owner nor admin
        """
        order = await self._get_or_404(order_id, ErrorMessages.ORDER_NOT_FOUND)
        if order["user_id"] != user["id"] and not _is_admin(user):
            logger.warning(f"User {user['id']} denied access to order {order_id}")
            raise AuthorizationError(message=ErrorMessages.PERMISSION_DENIED)
        return order

    # ==========================================================================
    # STOCK RESERVATION
    # ==========================================================================

    async def _release(self, reserved: List[Tuple[str, int]]) -> None:
        """Give reserved units back (compensation)."""
        for product_id, quantity in reversed(reserved):
            try:
                restored = await self._products.adjust_stock(product_id, quantity, -quantity)
            except Exception:
                logger.exception(f"Failed to release {quantity} units of product {product_id}")
                continue
            if restored is None:
                logger.error(f"Cannot release stock: product {product_id} no longer exists")
            else:
                logger.info(f"Released {quantity} units of product {product_id}")

    async def _reserve(self, demand: Dict[str, int], products: Dict[str, Record]) -> List[Tuple[str, int]]:
        """
        Take stock for every product or none.

        Raises:
            InsufficientStockError: If a guarded decrement did not apply
        """
        reserved: List[Tuple[str, int]] = []
        for product_id, quantity in demand.items():
            try:
                updated = await self._products.adjust_stock(product_id, -quantity, quantity)
            except Exception:
                await self._release(reserved)
                raise

            if updated is None:
                await self._release(reserved)
                current = await self._products.get_by_id(product_id)
                product = current or products[product_id]
                raise InsufficientStockError(
                    product_id=product_id,
                    name=product["name"],
                    requested=quantity,
                    available=current["stock"] if current else 0,
                )
            reserved.append((product_id, quantity))
        return reserved

    async def _restock(self, order: Record) -> None:
        """Return every line of a cancelled or refunded order to stock."""
        for item in order["items"]:
            quantity = int(item["quantity"])
            restored = await self._products.adjust_stock(item["product_id"], quantity, -quantity)
            if restored is None:
                logger.warning(
                    f"Order {order['order_number']}: product {item['product_id']} "
                    f"no longer exists, {quantity} units not restocked"
                )

    # ==========================================================================
    # PLACEMENT
    # ==========================================================================

    async def create_order(self, user: Record, schema: OrderCreate) -> OrderResponse:
        """
        Place an order.

        Args:
            user: Authenticated user record
            schema: Items, shipping address, payment and shipping method

        Returns:
            Created order in ``pending`` status

        Raises:
            BadRequestError: If the item list is empty or a product is unavailable
            ProductNotFoundError: If a product does not exist
            InsufficientStockError: If stock cannot cover a line
        """
        if not schema.items:
            raise BadRequestError(message=ErrorMessages.EMPTY_ORDER)

        products = await self._products.find_by_ids(item.product_id for item in schema.items)

        lines: List[Dict[str, Any]] = []
        demand: Dict[str, int] = {}
        items_price = Decimal("0")
        now = utc_now()

        for item in schema.items:
            product = products.get(item.product_id)
            if product is None:
                raise ProductNotFoundError(item.product_id)
            if product["status"] != ProductConstants.STATUS_ACTIVE:
                raise BadRequestError(
                    message=f"Product {product['name']} is not available",
                    details={"product_id": product["id"]},
                )
            check_variant_selection(product, item.variants)

            requested = demand.get(product["id"], 0) + item.quantity
            if product["stock"] < requested:
                raise InsufficientStockError(
                    product_id=product["id"],
                    name=product["name"],
                    requested=requested,
                    available=product["stock"],
                )
            demand[product["id"]] = requested

            unit_price = quantize_money(effective_price(product, now))
            line_total = quantize_money(unit_price * item.quantity)
            items_price += line_total
            lines.append({
                "product_id": product["id"],
                "name": product["name"],
                "image": product["images"][0]["url"] if product.get("images") else None,
                "variants": dict(item.variants),
                "quantity": item.quantity,
                "unit_price": unit_price,
                "total_price": line_total,
            })

        item_count = sum(demand.values())
        shipping_price = quantize_money(
            self._shipping.quote(schema.shipping_method, items_price, item_count)
        )
        discount_price = quantize_money(0)
        total_price = quantize_money(items_price + shipping_price - discount_price)

        reserved = await self._reserve(demand, products)
        try:
            order = await self._orders.create({
                "user_id": user["id"],
                "order_number": generate_order_number(user["id"], now),
                "items": lines,
                "shipping_address": schema.shipping_address.model_dump(),
                "payment_method": schema.payment_method,
                "shipping_method": schema.shipping_method,
                "items_price": quantize_money(items_price),
                "shipping_price": shipping_price,
                "discount_price": discount_price,
                "total_price": total_price,
                "notes": schema.notes,
            })
        except Exception:
            logger.error(f"Order insert failed for user {user['id']}, releasing stock")
            await self._release(reserved)
            raise

        logger.info(
            f"Order placed: {order['order_number']} user={user['id']} "
            f"items={item_count} total={total_price}"
        )

        if schema.clear_cart:
            cart = await self._carts.get_for_user(user["id"])
            if cart is not None and cart["items"]:
                await self._carts.save_items(cart["id"], [])

        return self._to_response(order)

    # ==========================================================================
    # STATUS LIFECYCLE
    # ==========================================================================

    async def _apply_status(self, order: Record, target: str) -> Record:
        """
        Move ``order`` to ``target`` and run the side effects of the move.

        The status write is conditional on the status read, so two
        concurrent requests cannot both restock the same order.
        """
        current = order["status"]
        if not check_transition(current, target):
            return order

        now = utc_now()
        changes: Dict[str, Any] = {"status": target}
        restock = (
            target in ("cancelled", "refunded")
            and current in OrderConstants.RESTOCKABLE_STATUSES
        )

        if restock:
            changes["cancelled_at"] = now
        if target == "refunded":
            changes["payment_status"] = "refunded"
        if target == "delivered":
            changes["payment_status"] = "completed"
            changes["is_paid"] = True
            changes["delivered_at"] = now
            if order.get("paid_at") is None:
                changes["paid_at"] = now

        if not await self._orders.transition(order["id"], current, changes):
            latest = await self._get_or_404(order["id"], ErrorMessages.ORDER_NOT_FOUND)
            raise InvalidTransitionError(latest["status"], target)

        if restock:
            await self._restock(order)

        logger.info(f"Order {order['order_number']} status {current} -> {target}")
        return await self._get_or_404(order["id"], ErrorMessages.ORDER_NOT_FOUND)

    async def update_status(self, order_id: str, target: str) -> OrderResponse:
        """
        Administrative status transition.

        Rewriting the current status is a no-op success, including on
        terminal orders.

        Raises:
            NotFoundError: If order missing
            InvalidTransitionError: If the move is not allowed
        """
        order = await self._get_or_404(order_id, ErrorMessages.ORDER_NOT_FOUND)
        return self._to_response(await self._apply_status(order, target))

    async def cancel(self, user: Record, order_id: str) -> OrderResponse:
        """
        Customer cancellation of a pending or processing order.

        Raises:
            InvalidTransitionError: If the order is past processing
        """
        order = await self._get_for(user, order_id)
        if order["status"] not in OrderConstants.RESTOCKABLE_STATUSES:
            raise InvalidTransitionError(order["status"], "cancelled")
        return self._to_response(await self._apply_status(order, "cancelled"))

    async def mark_paid(
        self,
        user: Record,
        order_id: str,
        payment: Optional[PaymentResult] = None,
    ) -> OrderResponse:
        """
        Record a successful payment.

        Raises:
            BusinessRuleError: If the order is cancelled, refunded or already paid
        """
        order = await self._get_for(user, order_id)
        if order["status"] in ("cancelled", "refunded"):
            raise BusinessRuleError(
                message=f"Cannot pay a {order['status']} order",
                rule="payable_status",
            )
        if order["is_paid"]:
            raise BusinessRuleError(message="Order is already paid", rule="single_payment")

        updated = await self._orders.update(order_id, {
            "payment_status": "completed",
            "is_paid": True,
            "paid_at": utc_now(),
            "payment_result": payment.model_dump(exclude_none=True) if payment else None,
        })
        logger.info(f"Order {order['order_number']} marked as paid")
        return self._to_response(updated)

    # ==========================================================================
    # QUERIES
    # ==========================================================================

    async def list_for_user(
        self,
        user_id: str,
        page: int,
        page_size: int,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        filters: Dict[str, Any] = {"user_id": user_id}
        if status:
            filters["status"] = status
        records, total = await self._orders.paginate(page, page_size, filters)
        return self._page(records, total, page, page_size)

    async def get_order(self, user: Record, order_id: str) -> OrderResponse:
        return self._to_response(await self._get_for(user, order_id))

    async def list_orders(
        self,
        page: int,
        page_size: int,
        status: Optional[str] = None,
        user_id: Optional[str] = None,
        order_number: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Dict[str, Any]:
        """Admin order listing."""
        if sort_by not in ORDER_SORT_FIELDS:
            raise BadRequestError(message=f"Cannot sort orders by '{sort_by}'")

        filters: Dict[str, Any] = {}
        if status:
            filters["status"] = status
        if user_id:
            filters["user_id"] = user_id
        if order_number:
            filters["order_number"] = {"$contains": order_number}

        created: Dict[str, Any] = {}
        if date_from:
            created["$gte"] = date_from
        if date_to:
            created["$lte"] = date_to
        if created:
            filters["created_at"] = created

        records, total = await self._orders.paginate(
            page,
            page_size,
            filters,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return self._page(records, total, page, page_size)

    # ==========================================================================
    # ADMINISTRATION
    # ==========================================================================

    async def admin_update(self, order_id: str, schema: OrderAdminUpdate) -> OrderResponse:
        """Edit shipping address, notes or tracking number."""
        await self._get_or_404(order_id, ErrorMessages.ORDER_NOT_FOUND)

        data = schema.model_dump(exclude_unset=True)
        if data.get("shipping_address") is None:
            data.pop("shipping_address", None)
        if not data:
            raise BadRequestError(message="No fields to update")

        updated = await self._orders.update(order_id, data)
        logger.info(f"Order {order_id} updated by admin: fields={sorted(data)}")
        return self._to_response(updated)

    async def delete(self, order_id: str) -> bool:
        """
        Delete an order.

        An order still holding reserved stock (pending or processing)
        gives it back first.
        """
        order = await self._get_or_404(order_id, ErrorMessages.ORDER_NOT_FOUND)
        if order["status"] in OrderConstants.RESTOCKABLE_STATUSES:
            await self._restock(order)
        await self._orders.delete(order_id)
        logger.info(f"Order {order['order_number']} deleted")
        return True
