"""
Structured logging configuration.
Outputs logs in JSON format for production observability.
"""
import logging
import sys
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

# Record attributes copied into the JSON "context" object when present
CONTEXT_FIELDS = ("request_id", "user_id", "movie_id")

# Per-request access and outbound HTTP logs are noise next to search logs
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")

DEBUG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class LogRecord(BaseModel):
    """Structured log record schema."""
    timestamp: str
    level: str
    logger: str
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)
    exception: Optional[str] = None


class JsonFormatter(logging.Formatter):
    """Format log records as JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the record as JSON."""
        context = {
            name: getattr(record, name)
            for name in CONTEXT_FIELDS
            if hasattr(record, name)
        }

        log_obj = LogRecord(
            timestamp=self.formatTime(record, self.datefmt),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
            context=context,
            exception=self.formatException(record.exc_info) if record.exc_info else None,
        )

        return log_obj.model_dump_json(exclude_none=True)


def configure_logging(debug: bool = False, level: str = "INFO") -> None:
    """Install one stdout handler on the root logger.

    JSON lines in production; a pipe-separated human format when debugging
    (which also forces DEBUG level).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(DEBUG_FORMAT) if debug else JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(logging.DEBUG if debug else level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").handlers = [handler]
