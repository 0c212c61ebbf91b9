# ==============================================================================
# LOG SCHEMAS
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import Field

from storefront.schemas.base import BaseSchema, TimestampSchema

LOG_LEVEL_PATTERN = "^(debug|info|warn|error|fatal)$"


class LogMeta(BaseSchema):
    """Request context attached to a log entry."""

    user: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    url: Optional[str] = None
    method: Optional[str] = None
    status_code: Optional[int] = None
    response_time: Optional[float] = None
    stack_trace: Optional[str] = None
    additional_info: Dict[str, Any] = Field(default_factory=dict)


class LogCreate(BaseSchema):
    level: str = Field(..., pattern=LOG_LEVEL_PATTERN)
    message: str = Field(..., min_length=1, max_length=5000)
    source: str = Field("server", pattern="^(server|client)$")
    meta: LogMeta = Field(default_factory=LogMeta)


class ClientErrorReport(BaseSchema):
    """Error reported by the storefront frontend."""

    message: str = Field(..., min_length=1, max_length=5000)
    stack_trace: Optional[str] = Field(None, max_length=20000)
    url: Optional[str] = Field(None, max_length=2000)
    additional_info: Dict[str, Any] = Field(default_factory=dict)


class LogResponse(TimestampSchema):
    id: str
    level: str
    message: str
    source: str
    meta: LogMeta = Field(default_factory=LogMeta)


class LogClearResult(BaseSchema):
    deleted: int
