"""LogRecord model - Persisted plug-in diagnostics."""

from datetime import datetime
from typing import Optional

from tradestore.core.log_helper import LogLevel
from tradestore.db import column, register_record
from .base import AutoIdRecord, utc_now


@register_record
class LogRecord(AutoIdRecord):
    """One diagnostic message with its plug-in severity."""

    level: LogLevel = column(LogLevel.Info, not_null=True)
    message: str = ""
    source: Optional[str] = None
    logged_at: datetime = column(default_factory=utc_now, not_null=True)
