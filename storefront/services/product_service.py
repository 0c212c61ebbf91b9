# ==============================================================================
# PRODUCT SERVICE - Catalog Business Logic
# ==============================================================================
# Public catalog queries, admin product management, effective pricing
# ==============================================================================

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from storefront.core.constants import ErrorMessages, ProductConstants, ReviewConstants
from storefront.core.exceptions import (
    BadRequestError,
    NotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.repositories import (
    CategoryRepository,
    ProductRepository,
    Record,
    ReviewRepository,
)
from storefront.schemas.product import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    RatingDistribution,
)
from storefront.services.base_service import BaseService
from storefront.utils.helpers import as_utc, to_decimal, utc_now

logger = logging.getLogger(__name__)

# Fields that may be explicitly cleared with null on update
_NULLABLE_FIELDS = frozenset({
    "discount_price",
    "discount_starts_at",
    "discount_ends_at",
    "category_id",
    "brand",
})


def effective_price(product: Record, now: Optional[datetime] = None) -> Decimal:
    """
    Unit price charged for ``product`` at ``now``.

    The discount price applies when set and ``now`` lies inside the
    discount window; either end of the window may be open.
    """
    price = to_decimal(product["price"])
    discount = product.get("discount_price")
    if discount is None:
        return price

    now = now or utc_now()
    starts = as_utc(product.get("discount_starts_at"))
    ends = as_utc(product.get("discount_ends_at"))
    if starts is not None and now < starts:
        return price
    if ends is not None and now > ends:
        return price
    return to_decimal(discount)


def check_variant_selection(product: Record, selection: Dict[str, str]) -> None:
    """
    Every selected option must exist on the product.

    Raises:
        BadRequestError: If a variant or option is unknown
    """
    options = {v["name"]: v.get("options", []) for v in product.get("variants") or []}
    for name, value in selection.items():
        if name not in options:
            raise BadRequestError(message=f"Product has no variant '{name}'")
        if options[name] and value not in options[name]:
            raise BadRequestError(message=f"Invalid option '{value}' for variant '{name}'")


def rating_summary(reviews: Iterable[Record]) -> Dict[str, Any]:
    """
    Aggregate approved reviews.

    Returns:
        Dict with ``average`` (1 decimal), ``count`` and a 1..5 ``distribution``
    """
    distribution = {
        star: 0
        for star in range(ReviewConstants.MIN_RATING, ReviewConstants.MAX_RATING + 1)
    }
    total = 0
    for review in reviews:
        distribution[int(review["rating"])] += 1
        total += int(review["rating"])

    count = sum(distribution.values())
    average = round(total / count, 1) if count else 0.0
    return {"average": average, "count": count, "distribution": distribution}


class ProductService(BaseService[ProductResponse]):
    """Product service: catalog listing and admin management."""

    _resource_name = "product"

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        self._products = ProductRepository(adapter)
        self._categories = CategoryRepository(adapter)
        self._reviews = ReviewRepository(adapter)
        super().__init__(adapter, self._products)

    def _to_response(self, record: Record) -> ProductResponse:
        return ProductResponse.model_validate({
            **record,
            "effective_price": effective_price(record),
            "in_stock": record["stock"] > 0,
        })

    async def _get_or_404(self, id: Any, message: Optional[str] = None) -> Record:
        product = await self._products.get_by_id(id)
        if product is None:
            raise ProductNotFoundError(id)
        return product

    async def _check_category(self, category_id: Optional[str]) -> None:
        if category_id and await self._categories.get_by_id(category_id) is None:
            raise NotFoundError(
                message=ErrorMessages.CATEGORY_NOT_FOUND,
                resource_type="category",
                resource_id=category_id,
            )

    @staticmethod
    def _check_pricing(data: Dict[str, Any]) -> None:
        """Cross-field pricing rules on the merged record."""
        price = data.get("price")
        discount = data.get("discount_price")
        if discount is not None and price is not None and to_decimal(discount) >= to_decimal(price):
            raise ValidationError(
                message="discount_price must be lower than price",
                errors=[{"field": "discount_price", "message": "must be lower than price"}],
            )

        starts = as_utc(data.get("discount_starts_at"))
        ends = as_utc(data.get("discount_ends_at"))
        if starts and ends and ends <= starts:
            raise ValidationError(
                message="discount_ends_at must be after discount_starts_at",
                errors=[{"field": "discount_ends_at", "message": "must be after discount_starts_at"}],
            )

    @staticmethod
    def _normalize_window(data: Dict[str, Any]) -> None:
        for key in ("discount_starts_at", "discount_ends_at"):
            if data.get(key) is not None:
                data[key] = as_utc(data[key])

    # ==========================================================================
    # PUBLIC CATALOG
    # ==========================================================================

    @staticmethod
    def build_filters(
        search: Optional[str] = None,
        category_id: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        featured: Optional[bool] = None,
        in_stock: Optional[bool] = None,
        status: Optional[str] = ProductConstants.STATUS_ACTIVE,
    ) -> Dict[str, Any]:
        """Translate catalog query parameters into a filter document."""
        filters: Dict[str, Any] = {}
        if status:
            filters["status"] = status
        if search:
            filters["$or"] = [
                {"name": {"$contains": search}},
                {"description": {"$contains": search}},
            ]
        if category_id:
            filters["category_id"] = category_id

        price_range: Dict[str, Any] = {}
        if min_price is not None:
            price_range["$gte"] = min_price
        if max_price is not None:
            price_range["$lte"] = max_price
        if price_range:
            filters["price"] = price_range

        if featured is not None:
            filters["is_featured"] = featured
        if in_stock is True:
            filters["stock"] = {"$gt": 0}
        elif in_stock is False:
            filters["stock"] = 0
        return filters

    async def list_products(
        self,
        page: int,
        page_size: int,
        sort: str = "newest",
        **criteria: Any,
    ) -> Dict[str, Any]:
        """
        Paginated product listing.

        Args:
            page: 1-indexed page
            page_size: Items per page
            sort: Key of ``ProductConstants.SORT_OPTIONS``
            **criteria: Keyword arguments of ``build_filters``

        Raises:
            BadRequestError: If the sort key is unknown
        """
        if sort not in ProductConstants.SORT_OPTIONS:
            raise BadRequestError(message=f"Unknown sort option '{sort}'")
        if (
            criteria.get("min_price") is not None
            and criteria.get("max_price") is not None
            and criteria["min_price"] > criteria["max_price"]
        ):
            raise BadRequestError(message="min_price cannot exceed max_price")

        sort_by, sort_order = ProductConstants.SORT_OPTIONS[sort]
        records, total = await self._products.paginate(
            page,
            page_size,
            filters=self.build_filters(**criteria),
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return self._page(records, total, page, page_size)

    async def get_public(self, product_id: str) -> ProductResponse:
        """Product detail; only active products are visible to the public."""
        product = await self._get_or_404(product_id)
        if product["status"] != ProductConstants.STATUS_ACTIVE:
            raise ProductNotFoundError(product_id)
        return self._to_response(product)

    async def rating_distribution(self, product_id: str) -> RatingDistribution:
        await self._get_or_404(product_id)
        reviews = await self._reviews.list_approved_for_product(product_id)
        return RatingDistribution(product_id=product_id, **rating_summary(reviews))

    # ==========================================================================
    # ADMINISTRATION
    # ==========================================================================

    async def create(self, schema: ProductCreate) -> ProductResponse:
        """
        Create a product.

        Raises:
            NotFoundError: If ``category_id`` does not exist
        """
        await self._check_category(schema.category_id)

        data = schema.model_dump()
        data["name"] = data["name"].strip()
        self._normalize_window(data)

        product = await self._products.create(data)
        logger.info(f"Product created: {product['id']} ({product['name']})")
        return self._to_response(product)

    async def update(self, product_id: str, schema: ProductUpdate) -> ProductResponse:
        """
        Apply a partial update.

        Only the fields present in the request are written. Discount
        rules are checked against the merged result.

        Raises:
            ProductNotFoundError: If product missing
            ValidationError: If the merged pricing is inconsistent
        """
        product = await self._get_or_404(product_id)

        data = {
            key: value
            for key, value in schema.model_dump(exclude_unset=True).items()
            if value is not None or key in _NULLABLE_FIELDS
        }
        if not data:
            raise BadRequestError(message="No fields to update")

        if data.get("category_id"):
            await self._check_category(data["category_id"])
        self._normalize_window(data)
        self._check_pricing({**product, **data})

        updated = await self._products.update(product_id, data)
        if updated is None:
            raise ProductNotFoundError(product_id)
        logger.info(f"Product updated: {product_id} fields={sorted(data)}")
        return self._to_response(updated)

    async def delete(self, product_id: str) -> bool:
        """Delete a product together with its reviews."""
        if not await self._products.delete(product_id):
            raise ProductNotFoundError(product_id)
        removed = await self._reviews.bulk_delete({"product_id": product_id})
        logger.info(f"Product deleted: {product_id} ({removed} reviews removed)")
        return True

    async def list_all(
        self,
        page: int,
        page_size: int,
        sort: str = "newest",
        status: Optional[str] = None,
        search: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Admin listing across every status."""
        return await self.list_products(
            page,
            page_size,
            sort=sort,
            status=status,
            search=search,
            category_id=category_id,
        )

    async def find_many(self, product_ids: List[str]) -> Dict[str, ProductResponse]:
        products = await self._products.find_by_ids(product_ids)
        return {pid: self._to_response(record) for pid, record in products.items()}
