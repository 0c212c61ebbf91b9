# ==============================================================================
# BASE SERVICE - Generic Business Logic Layer
# ==============================================================================
# Shared plumbing for services built on one primary repository
# ==============================================================================

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

from storefront.core.exceptions import NotFoundError
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.repositories.base_repository import BaseRepository, Record
from storefront.utils.helpers import paginate_results

# Type variable for generic service
ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)


class BaseService(ABC, Generic[ResponseSchemaType]):
    """
    Abstract base service providing standard business operations.

    Encapsulates business logic for one aggregate and exposes
    response schemas to the API layer. Services receive the bound
    adapter and build the repositories they need from it.

    Attributes:
        _adapter: Database adapter shared by the repositories
        _repository: Primary repository of the aggregate
        _resource_name: Name used in NOT_FOUND errors

    Example:
        >>> class CategoryService(BaseService[CategoryResponse]):
        ...     def _to_response(self, record):
        ...         return CategoryResponse.model_validate(record)
    """

    _resource_name: str = "resource"

    def __init__(
        self,
        adapter: BaseDatabaseAdapter,
        repository: BaseRepository,
    ) -> None:
        self._adapter = adapter
        self._repository = repository

    # ==========================================================================
    # ABSTRACT METHODS
    # ==========================================================================

    @abstractmethod
    def _to_response(self, record: Record) -> ResponseSchemaType:
        """Convert a stored record to the response schema."""
        pass

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    def _not_found(self, id: Any, message: Optional[str] = None) -> NotFoundError:
        return NotFoundError(
            message=message or f"{self._resource_name.capitalize()} not found",
            resource_type=self._resource_name,
            resource_id=id,
        )

    async def _get_or_404(self, id: Any, message: Optional[str] = None) -> Record:
        """
        Load a record of the primary repository.

        Raises:
            NotFoundError: If the record does not exist
        """
        record = await self._repository.get_by_id(id)
        if record is None:
            raise self._not_found(id, message)
        return record

    def _page(
        self,
        records: List[Record],
        total: int,
        page: int,
        page_size: int,
    ) -> Dict[str, Any]:
        """Build a paginated payload of response schemas."""
        return paginate_results(
            [self._to_response(r) for r in records],
            page=page,
            page_size=page_size,
            total=total,
        )

    # ==========================================================================
    # CRUD OPERATIONS
    # ==========================================================================

    async def get_by_id(self, id: Any) -> ResponseSchemaType:
        """
        Retrieve entity by ID.

        Raises:
            NotFoundError: If entity not found
        """
        return self._to_response(await self._get_or_404(id))

    async def delete(self, id: Any) -> bool:
        """
        Delete an entity by ID.

        Raises:
            NotFoundError: If entity not found
        """
        if not await self._repository.delete(id):
            raise self._not_found(id)
        return True
