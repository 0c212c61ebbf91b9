# ==============================================================================
# PRODUCTS ENDPOINTS - Catalog Routes
# ==============================================================================
# Public catalog browsing and admin product management
# ==============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Query, status

from storefront.api.dependencies import AdminUser, PaginationDep, ProductServiceDep
from storefront.core.constants import ProductConstants, SuccessMessages
from storefront.schemas.base import APIResponse, PaginatedResponse
from storefront.schemas.product import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    RatingDistribution,
)

router = APIRouter(prefix="/products", tags=["Products"])

SORT_HELP = "One of: " + ", ".join(ProductConstants.SORT_OPTIONS)


# ==============================================================================
# PUBLIC CATALOG
# ==============================================================================

@router.get(
    "",
    response_model=APIResponse[PaginatedResponse[ProductResponse]],
    summary="List products",
    description="Browse active products with search, filters and sorting.",
)
async def list_products(
    pagination: PaginationDep,
    service: ProductServiceDep,
    search: Optional[str] = Query(None, max_length=100, description="Name or description substring"),
    category_id: Optional[str] = Query(None),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    featured: Optional[bool] = Query(None),
    in_stock: Optional[bool] = Query(None),
    sort: str = Query("newest", description=SORT_HELP),
) -> APIResponse[PaginatedResponse[ProductResponse]]:
    result = await service.list_products(
        pagination.page,
        pagination.page_size,
        sort=sort,
        search=search,
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        featured=featured,
        in_stock=in_stock,
    )
    return APIResponse.ok(data=result)


@router.get(
    "/admin/all",
    response_model=APIResponse[PaginatedResponse[ProductResponse]],
    summary="List all products",
    description="Admin listing including inactive and draft products.",
)
async def list_all_products(
    admin: AdminUser,
    pagination: PaginationDep,
    service: ProductServiceDep,
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(active|inactive|draft)$"),
    search: Optional[str] = Query(None, max_length=100),
    category_id: Optional[str] = Query(None),
    sort: str = Query("newest", description=SORT_HELP),
) -> APIResponse[PaginatedResponse[ProductResponse]]:
    result = await service.list_all(
        pagination.page,
        pagination.page_size,
        sort=sort,
        status=status_filter,
        search=search,
        category_id=category_id,
    )
    return APIResponse.ok(data=result)


@router.get(
    "/{product_id}",
    response_model=APIResponse[ProductResponse],
    summary="Get product",
)
async def get_product(
    product_id: str,
    service: ProductServiceDep,
) -> APIResponse[ProductResponse]:
    return APIResponse.ok(data=await service.get_public(product_id))


@router.get(
    "/{product_id}/ratings",
    response_model=APIResponse[RatingDistribution],
    summary="Rating distribution",
    description="Average rating and 1..5 star counts of approved reviews.",
)
async def get_rating_distribution(
    product_id: str,
    service: ProductServiceDep,
) -> APIResponse[RatingDistribution]:
    return APIResponse.ok(data=await service.rating_distribution(product_id))


# ==============================================================================
# ADMINISTRATION
# ==============================================================================

@router.post(
    "",
    response_model=APIResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
)
async def create_product(
    schema: ProductCreate,
    admin: AdminUser,
    service: ProductServiceDep,
) -> APIResponse[ProductResponse]:
    product = await service.create(schema)
    return APIResponse.ok(data=product, message=SuccessMessages.CREATED)


@router.put(
    "/{product_id}",
    response_model=APIResponse[ProductResponse],
    summary="Update product",
)
@router.patch(
    "/{product_id}",
    response_model=APIResponse[ProductResponse],
    summary="Partially update product",
)
async def update_product(
    product_id: str,
    schema: ProductUpdate,
    admin: AdminUser,
    service: ProductServiceDep,
) -> APIResponse[ProductResponse]:
    """Only the fields present in the body are changed."""
    product = await service.update(product_id, schema)
    return APIResponse.ok(data=product, message=SuccessMessages.UPDATED)


@router.delete(
    "/{product_id}",
    response_model=APIResponse[dict],
    summary="Delete product",
    description="Delete a product together with its reviews.",
)
async def delete_product(
    product_id: str,
    admin: AdminUser,
    service: ProductServiceDep,
) -> APIResponse[dict]:
    await service.delete(product_id)
    return APIResponse.ok(message=SuccessMessages.DELETED)
