# ==============================================================================
# LOG SERVICE - Persisted Log Entries
# ==============================================================================
# Admin-reviewable log store plus client error intake
# ==============================================================================

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.repositories import LogRepository, Record
from storefront.schemas.log import (
    ClientErrorReport,
    LogClearResult,
    LogCreate,
    LogMeta,
    LogResponse,
)
from storefront.services.base_service import BaseService

logger = logging.getLogger(__name__)


class LogService(BaseService[LogResponse]):
    """Log entry service."""

    _resource_name = "log"

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        self._logs = LogRepository(adapter)
        super().__init__(adapter, self._logs)

    def _to_response(self, record: Record) -> LogResponse:
        return LogResponse.model_validate(record)

    async def list_logs(
        self,
        page: int,
        page_size: int,
        level: Optional[str] = None,
        source: Optional[str] = None,
        search: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Newest first, filtered by level, source, text and date range."""
        filters: Dict[str, Any] = {}
        if level:
            filters["level"] = level
        if source:
            filters["source"] = source
        if search:
            filters["message"] = {"$contains": search}

        created: Dict[str, Any] = {}
        if date_from:
            created["$gte"] = date_from
        if date_to:
            created["$lte"] = date_to
        if created:
            filters["created_at"] = created

        records, total = await self._logs.paginate(page, page_size, filters)
        return self._page(records, total, page, page_size)

    async def create(self, schema: LogCreate) -> LogResponse:
        entry = await self._logs.create({
            "level": schema.level,
            "message": schema.message,
            "source": schema.source,
            "meta": schema.meta.model_dump(exclude_none=True),
        })
        return self._to_response(entry)

    async def report_client_error(
        self,
        report: ClientErrorReport,
        user_id: Optional[str] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> LogResponse:
        """
        Record an error raised in the browser.

        The entry is stored with source ``client`` and echoed to the
        server log so it shows up next to backend errors.
        """
        meta = LogMeta(
            user=user_id,
            ip=ip,
            user_agent=user_agent,
            url=report.url,
            stack_trace=report.stack_trace,
            additional_info=report.additional_info,
        )
        entry = await self.create(LogCreate(
            level="error",
            message=report.message,
            source="client",
            meta=meta,
        ))
        logger.error(
            f"Client error: {report.message}",
            extra={"client_url": report.url, "log_entry_id": entry.id},
        )
        return entry

    async def clear(self, before: Optional[datetime] = None) -> LogClearResult:
        """Delete all entries, or the ones created before ``before``."""
        deleted = await self._logs.clear(before)
        if before:
            logger.info(f"Cleared {deleted} log entries older than {before.isoformat()}")
        else:
            logger.info(f"Cleared all {deleted} log entries")
        return LogClearResult(deleted=deleted)
