"""Logging collaborator for the store layer.

Every caught failure in the record-mapping layer is forwarded through
``log()`` with one of the broker plug-in severities, which map onto the
standard ``logging`` levels.
"""

import logging
from enum import IntEnum
from typing import Optional

CAUTION = 25
logging.addLevelName(CAUTION, "CAUTION")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LogLevel(IntEnum):
    """Plug-in log severities (bit values, as stored in LogRecord rows)."""

    Info = 1
    Caution = 2
    Warning = 4
    Error = 8
    Critical = 16

    @property
    def logging_level(self) -> int:
        return _LEVEL_MAP[self]


_LEVEL_MAP = {
    LogLevel.Info: logging.INFO,
    LogLevel.Caution: CAUTION,
    LogLevel.Warning: logging.WARNING,
    LogLevel.Error: logging.ERROR,
    LogLevel.Critical: logging.CRITICAL,
}


def log(level: LogLevel, message: str, logger: Optional[logging.Logger] = None) -> None:
    """Forward a message to the logging facility with a plug-in severity.

    Args:
        level: Plug-in severity
        message: Text to log
        logger: Logger to use (defaults to this module's logger)
    """
    (logger or logging.getLogger(__name__)).log(level.logging_level, message)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for scripts and the host application."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
