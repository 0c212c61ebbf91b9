# ==============================================================================
# LOG ENTRY MODEL - Persisted Application Logs
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.domain_models.base import SQLBase, TimestampMixin


class LogEntry(SQLBase, TimestampMixin):
    """
    Log entry reviewed from the admin panel.

    ``meta`` holds request context: user, ip, user_agent, url, method,
    status_code, response_time, stack_trace, additional_info.
    """

    __tablename__ = "logs"

    level: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        index=True,
    )
    message: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    source: Mapped[str] = mapped_column(
        String(10),
        default="server",
        nullable=False,
    )
    meta: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        default=dict,
        nullable=False,
    )
