# ==============================================================================
# CART ENDPOINTS - Cart and Wishlist Routes
# ==============================================================================
# Per-user shopping cart and wishlist
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter, status

from storefront.api.dependencies import CartServiceDep, CurrentUser, WishlistServiceDep
from storefront.schemas.base import APIResponse
from storefront.schemas.cart import (
    CartItemAdd,
    CartItemUpdate,
    CartResponse,
    WishlistItemAdd,
    WishlistResponse,
)

router = APIRouter(prefix="/cart", tags=["Cart"])
wishlist_router = APIRouter(prefix="/wishlist", tags=["Wishlist"])


# ==============================================================================
# CART
# ==============================================================================

@router.get(
    "",
    response_model=APIResponse[CartResponse],
    summary="Get cart",
    description="Return the current user's cart, creating an empty one on first access.",
)
async def get_cart(user: CurrentUser, service: CartServiceDep) -> APIResponse[CartResponse]:
    return APIResponse.ok(data=await service.get_cart(user["id"]))


@router.post(
    "/items",
    response_model=APIResponse[CartResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add item to cart",
)
async def add_item(
    schema: CartItemAdd,
    user: CurrentUser,
    service: CartServiceDep,
) -> APIResponse[CartResponse]:
    cart = await service.add_item(user["id"], schema)
    return APIResponse.ok(data=cart, message="Item added to cart")


@router.put(
    "/items/{item_id}",
    response_model=APIResponse[CartResponse],
    summary="Update cart item",
    description="Change the quantity of a line; zero removes it.",
)
async def update_item(
    item_id: str,
    schema: CartItemUpdate,
    user: CurrentUser,
    service: CartServiceDep,
) -> APIResponse[CartResponse]:
    cart = await service.update_item(user["id"], item_id, schema.quantity)
    return APIResponse.ok(data=cart, message="Cart updated")


@router.delete(
    "/items/{item_id}",
    response_model=APIResponse[CartResponse],
    summary="Remove cart item",
)
async def remove_item(
    item_id: str,
    user: CurrentUser,
    service: CartServiceDep,
) -> APIResponse[CartResponse]:
    cart = await service.remove_item(user["id"], item_id)
    return APIResponse.ok(data=cart, message="Item removed from cart")


@router.delete(
    "",
    response_model=APIResponse[CartResponse],
    summary="Clear cart",
)
async def clear_cart(user: CurrentUser, service: CartServiceDep) -> APIResponse[CartResponse]:
    cart = await service.clear(user["id"])
    return APIResponse.ok(data=cart, message="Cart cleared")


# ==============================================================================
# WISHLIST
# ==============================================================================

@wishlist_router.get(
    "",
    response_model=APIResponse[WishlistResponse],
    summary="Get wishlist",
)
async def get_wishlist(user: CurrentUser, service: WishlistServiceDep) -> APIResponse[WishlistResponse]:
    return APIResponse.ok(data=await service.get_wishlist(user["id"]))


@wishlist_router.post(
    "",
    response_model=APIResponse[WishlistResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add to wishlist",
)
async def add_to_wishlist(
    schema: WishlistItemAdd,
    user: CurrentUser,
    service: WishlistServiceDep,
) -> APIResponse[WishlistResponse]:
    wishlist = await service.add(user["id"], schema.product_id)
    return APIResponse.ok(data=wishlist, message="Product added to wishlist")


@wishlist_router.delete(
    "/{product_id}",
    response_model=APIResponse[WishlistResponse],
    summary="Remove from wishlist",
)
async def remove_from_wishlist(
    product_id: str,
    user: CurrentUser,
    service: WishlistServiceDep,
) -> APIResponse[WishlistResponse]:
    wishlist = await service.remove(user["id"], product_id)
    return APIResponse.ok(data=wishlist, message="Product removed from wishlist")
