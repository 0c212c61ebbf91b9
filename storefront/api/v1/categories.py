# ==============================================================================
# CATEGORIES ENDPOINTS - Category Routes
# ==============================================================================

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query, status

from storefront.api.dependencies import (
    AdminUser,
    CategoryServiceDep,
    PaginationDep,
    ProductServiceDep,
)
from storefront.api.v1.products import SORT_HELP
from storefront.core.constants import SuccessMessages
from storefront.schemas.base import APIResponse, PaginatedResponse
from storefront.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
)
from storefront.schemas.product import ProductResponse

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get(
    "",
    response_model=APIResponse[PaginatedResponse[CategoryResponse]],
    summary="List categories",
)
async def list_categories(
    pagination: PaginationDep,
    service: CategoryServiceDep,
    search: Optional[str] = Query(None, max_length=100),
) -> APIResponse[PaginatedResponse[CategoryResponse]]:
    result = await service.list_categories(pagination.page, pagination.page_size, search=search)
    return APIResponse.ok(data=result)


@router.get(
    "/tree",
    response_model=APIResponse[List[CategoryTreeNode]],
    summary="Category tree",
    description="Active categories nested under their parents.",
)
async def category_tree(service: CategoryServiceDep) -> APIResponse[List[CategoryTreeNode]]:
    return APIResponse.ok(data=await service.tree())


@router.get(
    "/{key}",
    response_model=APIResponse[CategoryResponse],
    summary="Get category",
    description="Look up a category by id or slug.",
)
async def get_category(key: str, service: CategoryServiceDep) -> APIResponse[CategoryResponse]:
    return APIResponse.ok(data=await service.get(key))


@router.get(
    "/{key}/products",
    response_model=APIResponse[PaginatedResponse[ProductResponse]],
    summary="Products of a category",
)
async def category_products(
    key: str,
    pagination: PaginationDep,
    service: CategoryServiceDep,
    products: ProductServiceDep,
    sort: str = Query("newest", description=SORT_HELP),
) -> APIResponse[PaginatedResponse[ProductResponse]]:
    result = await service.list_products(
        key,
        pagination.page,
        pagination.page_size,
        sort=sort,
        product_service=products,
    )
    return APIResponse.ok(data=result)


@router.post(
    "",
    response_model=APIResponse[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    schema: CategoryCreate,
    admin: AdminUser,
    service: CategoryServiceDep,
) -> APIResponse[CategoryResponse]:
    category = await service.create(schema)
    return APIResponse.ok(data=category, message=SuccessMessages.CREATED)


@router.put(
    "/{category_id}",
    response_model=APIResponse[CategoryResponse],
    summary="Update category",
)
async def update_category(
    category_id: str,
    schema: CategoryUpdate,
    admin: AdminUser,
    service: CategoryServiceDep,
) -> APIResponse[CategoryResponse]:
    category = await service.update(category_id, schema)
    return APIResponse.ok(data=category, message=SuccessMessages.UPDATED)


@router.delete(
    "/{category_id}",
    response_model=APIResponse[dict],
    summary="Delete category",
    description="Children move up to the deleted category's parent; its products become uncategorized.",
)
async def delete_category(
    category_id: str,
    admin: AdminUser,
    service: CategoryServiceDep,
) -> APIResponse[dict]:
    await service.delete(category_id)
    return APIResponse.ok(message=SuccessMessages.DELETED)
