# ==============================================================================
# LOGS ENDPOINTS - Log Entry Routes
# ==============================================================================
# Admin log review plus the public client error intake
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query, Request, status

from storefront.api.dependencies import (
    AdminUser,
    LogServiceDep,
    OptionalUser,
    PaginationDep,
)
from storefront.core.constants import SuccessMessages
from storefront.schemas.base import APIResponse, PaginatedResponse
from storefront.schemas.log import (
    LOG_LEVEL_PATTERN,
    ClientErrorReport,
    LogClearResult,
    LogCreate,
    LogResponse,
)

router = APIRouter(prefix="/logs", tags=["Logs"])


@router.post(
    "/client-error",
    response_model=APIResponse[LogResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Report client error",
    description="Record an error raised in the browser. Authentication is optional.",
)
async def report_client_error(
    report: ClientErrorReport,
    request: Request,
    user: OptionalUser,
    service: LogServiceDep,
) -> APIResponse[LogResponse]:
    entry = await service.report_client_error(
        report,
        user_id=user["id"] if user else None,
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return APIResponse.ok(data=entry, message="Error reported")


@router.get(
    "",
    response_model=APIResponse[PaginatedResponse[LogResponse]],
    summary="List log entries",
)
async def list_logs(
    admin: AdminUser,
    pagination: PaginationDep,
    service: LogServiceDep,
    level: Optional[str] = Query(None, pattern=LOG_LEVEL_PATTERN),
    source: Optional[str] = Query(None, pattern="^(server|client)$"),
    search: Optional[str] = Query(None, max_length=200),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
) -> APIResponse[PaginatedResponse[LogResponse]]:
    result = await service.list_logs(
        pagination.page,
        pagination.page_size,
        level=level,
        source=source,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )
    return APIResponse.ok(data=result)


@router.post(
    "",
    response_model=APIResponse[LogResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create log entry",
)
async def create_log(
    schema: LogCreate,
    admin: AdminUser,
    service: LogServiceDep,
) -> APIResponse[LogResponse]:
    entry = await service.create(schema)
    return APIResponse.ok(data=entry, message=SuccessMessages.CREATED)


@router.delete(
    "",
    response_model=APIResponse[LogClearResult],
    summary="Clear log entries",
    description="Delete every entry, or only those created before `before`.",
)
async def clear_logs(
    admin: AdminUser,
    service: LogServiceDep,
    before: Optional[datetime] = Query(None),
) -> APIResponse[LogClearResult]:
    result = await service.clear(before)
    return APIResponse.ok(data=result, message=f"{result.deleted} log entries deleted")
