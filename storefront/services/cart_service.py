# ==============================================================================
# CART SERVICE - Shopping Cart & Wishlist
# ==============================================================================
# One cart and one wishlist per user, created on first use
# Writes replace the whole item list (last write wins)
# ==============================================================================

from __future__ import annotations

import logging
from typing import Any, Dict, List

from storefront.core.constants import ErrorMessages, ProductConstants
from storefront.core.exceptions import (
    BadRequestError,
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    ProductNotFoundError,
)
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.repositories import (
    CartRepository,
    ProductRepository,
    Record,
    WishlistRepository,
)
from storefront.schemas.cart import (
    CartItemAdd,
    CartResponse,
    WishlistItemResponse,
    WishlistResponse,
)
from storefront.services.base_service import BaseService
from storefront.services.product_service import (
    ProductService,
    check_variant_selection,
    effective_price,
)
from storefront.utils.helpers import generate_uuid, utc_now

logger = logging.getLogger(__name__)


class CartService(BaseService[CartResponse]):
    """
    Cart service.

    Line totals and cart totals are derived by ``CartRepository`` on
    every save; nothing here writes them directly.
    """

    _resource_name = "cart"

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        self._carts = CartRepository(adapter)
        self._products = ProductRepository(adapter)
        super().__init__(adapter, self._carts)

    def _to_response(self, record: Record) -> CartResponse:
        return CartResponse.model_validate(record)

    async def _load_product(self, product_id: str) -> Record:
        product = await self._products.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    @staticmethod
    def _check_stock(product: Record, quantity: int) -> None:
        if quantity > product["stock"]:
            raise InsufficientStockError(
                product_id=product["id"],
                name=product["name"],
                requested=quantity,
                available=product["stock"],
            )

    async def _save(self, cart: Record, items: List[Dict[str, Any]]) -> CartResponse:
        updated = await self._carts.save_items(cart["id"], items)
        return self._to_response(updated)

    @staticmethod
    def _find_line(items: List[Dict[str, Any]], item_id: str) -> Dict[str, Any]:
        for item in items:
            if item["id"] == item_id:
                return item
        raise NotFoundError(
            message=ErrorMessages.CART_ITEM_NOT_FOUND,
            resource_type="cart_item",
            resource_id=item_id,
        )

    # ==========================================================================
    # CART
    # ==========================================================================

    async def get_cart(self, user_id: str) -> CartResponse:
        return self._to_response(await self._carts.get_or_create(user_id))

    async def add_item(self, user_id: str, schema: CartItemAdd) -> CartResponse:
        """
        Add a product to the cart.

        A line with the same product and the same variant selection is
        incremented instead of duplicated. The resulting quantity is
        checked against live stock.

        Raises:
            ProductNotFoundError: If product missing
            BadRequestError: If product not purchasable or variant invalid
            InsufficientStockError: If stock cannot cover the quantity
        """
        product = await self._load_product(schema.product_id)
        if product["status"] != ProductConstants.STATUS_ACTIVE:
            raise BadRequestError(message=f"Product {product['name']} is not available")
        check_variant_selection(product, schema.variants)

        cart = await self._carts.get_or_create(user_id)
        items = list(cart["items"])

        line = next(
            (
                item for item in items
                if item["product_id"] == product["id"] and item.get("variants", {}) == schema.variants
            ),
            None,
        )
        quantity = schema.quantity + (line["quantity"] if line else 0)
        self._check_stock(product, quantity)

        image = product["images"][0]["url"] if product.get("images") else None
        if line is None:
            items.append({
                "id": generate_uuid(),
                "product_id": product["id"],
                "name": product["name"],
                "image": image,
                "price": effective_price(product),
                "quantity": quantity,
                "variants": dict(schema.variants),
            })
        else:
            line["quantity"] = quantity
            line["price"] = effective_price(product)

        return await self._save(cart, items)

    async def update_item(self, user_id: str, item_id: str, quantity: int) -> CartResponse:
        """
        Change a line quantity; zero or less removes the line.

        Raises:
            NotFoundError: If the line is not in the cart
            InsufficientStockError: If stock cannot cover the quantity
        """
        cart = await self._carts.get_or_create(user_id)
        items = list(cart["items"])
        line = self._find_line(items, item_id)

        if quantity <= 0:
            items.remove(line)
        else:
            product = await self._load_product(line["product_id"])
            self._check_stock(product, quantity)
            line["quantity"] = quantity

        return await self._save(cart, items)

    async def remove_item(self, user_id: str, item_id: str) -> CartResponse:
        cart = await self._carts.get_or_create(user_id)
        items = list(cart["items"])
        items.remove(self._find_line(items, item_id))
        return await self._save(cart, items)

    async def clear(self, user_id: str) -> CartResponse:
        cart = await self._carts.get_or_create(user_id)
        logger.debug(f"Clearing cart {cart['id']} of user {user_id}")
        return await self._save(cart, [])


class WishlistService(BaseService[WishlistResponse]):
    """Wishlist service; items are product references with the time they were added."""

    _resource_name = "wishlist"

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        self._wishlists = WishlistRepository(adapter)
        self._products = ProductRepository(adapter)
        super().__init__(adapter, self._wishlists)

    def _to_response(self, record: Record) -> WishlistResponse:
        return WishlistResponse.model_validate(record)

    async def _expand(self, wishlist: Record) -> WishlistResponse:
        """Attach current product details to each item."""
        product_ids = [item["product_id"] for item in wishlist["items"]]
        products = await ProductService(self._adapter).find_many(product_ids)

        response = self._to_response({**wishlist, "items": []})
        response.items = [
            WishlistItemResponse(
                product_id=item["product_id"],
                added_at=item["added_at"],
                product=products.get(item["product_id"]),
            )
            for item in wishlist["items"]
        ]
        return response

    async def get_wishlist(self, user_id: str) -> WishlistResponse:
        return await self._expand(await self._wishlists.get_or_create(user_id))

    async def add(self, user_id: str, product_id: str) -> WishlistResponse:
        """
        Add a product to the wishlist.

        Raises:
            ProductNotFoundError: If product missing
            ConflictError: If already in the wishlist
        """
        if await self._products.get_by_id(product_id) is None:
            raise ProductNotFoundError(product_id)

        wishlist = await self._wishlists.get_or_create(user_id)
        if any(item["product_id"] == product_id for item in wishlist["items"]):
            raise ConflictError(
                message="Product is already in the wishlist",
                resource_type="wishlist",
                details={"product_id": product_id},
            )

        items = list(wishlist["items"]) + [{"product_id": product_id, "added_at": utc_now()}]
        return await self._expand(await self._wishlists.save_items(wishlist["id"], items))

    async def remove(self, user_id: str, product_id: str) -> WishlistResponse:
        wishlist = await self._wishlists.get_or_create(user_id)
        items = [item for item in wishlist["items"] if item["product_id"] != product_id]
        if len(items) == len(wishlist["items"]):
            raise NotFoundError(
                message="Product is not in the wishlist",
                resource_type="wishlist_item",
                resource_id=product_id,
            )
        return await self._expand(await self._wishlists.save_items(wishlist["id"], items))
