# ==============================================================================
# CATEGORY SERVICE
# ==============================================================================
# Category listing, tree building and admin management
# ==============================================================================

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from storefront.core.constants import DatabaseConstants, ErrorMessages, ProductConstants
from storefront.core.exceptions import BadRequestError, ConflictError
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.repositories import CategoryRepository, ProductRepository, Record
from storefront.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
)
from storefront.services.base_service import BaseService
from storefront.services.product_service import ProductService
from storefront.utils.helpers import slugify

logger = logging.getLogger(__name__)


class CategoryService(BaseService[CategoryResponse]):
    """Category service."""

    _resource_name = "category"

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        self._categories = CategoryRepository(adapter)
        self._products = ProductRepository(adapter)
        super().__init__(adapter, self._categories)

    def _to_response(self, record: Record) -> CategoryResponse:
        return CategoryResponse.model_validate(record)

    async def _resolve(self, key: str) -> Record:
        category = await self._categories.get_by_id_or_slug(key)
        if category is None:
            raise self._not_found(key, ErrorMessages.CATEGORY_NOT_FOUND)
        return category

    async def _ensure_unique(
        self,
        name: Optional[str],
        slug: Optional[str],
        exclude_id: Optional[str] = None,
    ) -> None:
        for field, value in (("name", name), ("slug", slug)):
            if not value:
                continue
            filters: Dict[str, Any] = {field: value}
            if exclude_id:
                filters["id"] = {"$ne": exclude_id}
            if await self._categories.exists(filters):
                raise ConflictError(
                    message=f"A category with this {field} already exists",
                    resource_type="category",
                    details={field: value},
                )

    async def _check_parent(self, parent_id: Optional[str], category_id: Optional[str] = None) -> None:
        """
        Validate a parent reference.

        The parent must exist and must not be the category itself or
        one of its descendants.
        """
        if not parent_id:
            return
        if parent_id == category_id:
            raise BadRequestError(message="A category cannot be its own parent")

        parent = await self._categories.get_by_id(parent_id)
        if parent is None:
            raise self._not_found(parent_id, "Parent category not found")

        seen = set()
        while category_id and parent is not None and parent["id"] not in seen:
            if parent["parent_id"] == category_id:
                raise BadRequestError(message="A category cannot be moved under its own subcategory")
            seen.add(parent["id"])
            parent = await self._categories.get_by_id(parent["parent_id"]) if parent["parent_id"] else None

    # ==========================================================================
    # QUERIES
    # ==========================================================================

    async def list_categories(
        self,
        page: int,
        page_size: int,
        search: Optional[str] = None,
        active_only: bool = True,
    ) -> Dict[str, Any]:
        filters: Dict[str, Any] = {}
        if active_only:
            filters["is_active"] = True
        if search:
            filters["name"] = {"$contains": search}

        records, total = await self._categories.paginate(
            page,
            page_size,
            filters,
            sort_by="name",
            sort_order="asc",
        )
        return self._page(records, total, page, page_size)

    async def tree(self, active_only: bool = True) -> List[CategoryTreeNode]:
        """
        Nest categories under their parents.

        Categories whose parent is missing (or filtered out) become roots.
        """
        records = await self._categories.get_all(
            limit=DatabaseConstants.MAX_SCAN_SIZE,
            filters={"is_active": True} if active_only else None,
            sort_by="name",
            sort_order="asc",
        )

        nodes = {r["id"]: CategoryTreeNode.model_validate(r) for r in records}
        roots: List[CategoryTreeNode] = []
        for record in records:
            node = nodes[record["id"]]
            parent = nodes.get(record["parent_id"]) if record["parent_id"] else None
            if parent is None:
                roots.append(node)
            else:
                parent.children.append(node)
        return roots

    async def get(self, key: str) -> CategoryResponse:
        """Get a category by id or slug."""
        return self._to_response(await self._resolve(key))

    async def list_products(
        self,
        key: str,
        page: int,
        page_size: int,
        sort: str = "newest",
        product_service: Optional[ProductService] = None,
    ) -> Dict[str, Any]:
        """Active products of a category addressed by id or slug."""
        category = await self._resolve(key)
        products = product_service or ProductService(self._adapter)
        return await products.list_products(
            page,
            page_size,
            sort=sort,
            category_id=category["id"],
            status=ProductConstants.STATUS_ACTIVE,
        )

    # ==========================================================================
    # ADMINISTRATION
    # ==========================================================================

    async def create(self, schema: CategoryCreate) -> CategoryResponse:
        """
        Create a category.

        Raises:
            ConflictError: If name or slug is taken
        """
        data = schema.model_dump()
        data["name"] = data["name"].strip()
        data["slug"] = data["slug"] or slugify(data["name"])

        await self._ensure_unique(data["name"], data["slug"])
        await self._check_parent(data["parent_id"])

        category = await self._categories.create(data)
        logger.info(f"Category created: {category['slug']}")
        return self._to_response(category)

    async def update(self, category_id: str, schema: CategoryUpdate) -> CategoryResponse:
        """
        Update a category.

        A rename re-derives the slug unless a slug is sent with it.
        """
        category = await self._get_or_404(category_id, ErrorMessages.CATEGORY_NOT_FOUND)

        data = schema.model_dump(exclude_unset=True)
        for key in ("name", "slug", "is_active"):
            if key in data and data[key] is None:
                data.pop(key)
        if not data:
            raise BadRequestError(message="No fields to update")

        if "name" in data:
            data["name"] = data["name"].strip()
            if "slug" not in data and data["name"] != category["name"]:
                data["slug"] = slugify(data["name"])

        await self._ensure_unique(data.get("name"), data.get("slug"), exclude_id=category_id)
        if "parent_id" in data:
            await self._check_parent(data["parent_id"], category_id)

        updated = await self._categories.update(category_id, data)
        logger.info(f"Category updated: {category_id} fields={sorted(data)}")
        return self._to_response(updated)

    async def delete(self, category_id: str) -> bool:
        """
        Delete a category.

        Subcategories move up to the deleted category's parent and its
        products become uncategorized.
        """
        category = await self._get_or_404(category_id, ErrorMessages.CATEGORY_NOT_FOUND)

        await self._categories.bulk_update(
            {"parent_id": category_id},
            {"parent_id": category["parent_id"]},
        )
        detached = await self._products.bulk_update(
            {"category_id": category_id},
            {"category_id": None},
        )
        await self._categories.delete(category_id)
        logger.info(f"Category deleted: {category_id} ({detached} products detached)")
        return True
