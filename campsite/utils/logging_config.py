"""
Structured Logging Configuration

Provides JSON-formatted logging with:
- Request ID tracking
- Reservation context (entity type / id)
- Structured output for log aggregation
"""

import logging
import json
import sys
from datetime import date, datetime, timezone
from typing import Optional, Any, Dict, List
from contextvars import ContextVar

# Context variable for request tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')


class JSONFormatter(logging.Formatter):
    """
    Custom JSON formatter for structured logging.
    Outputs logs in JSON format for easy parsing by log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        # Add location info
        log_data["module"] = record.module
        log_data["function"] = record.funcName
        log_data["line"] = record.lineno

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields from record
        if hasattr(record, 'extra_data'):
            log_data["data"] = record.extra_data

        if hasattr(record, 'entity_type'):
            log_data["entity_type"] = record.entity_type
        if hasattr(record, 'entity_id'):
            log_data["entity_id"] = record.entity_id

        return json.dumps(log_data, ensure_ascii=False, default=str)


class StructuredLogger(logging.LoggerAdapter):
    """
    Logger adapter that adds structured context to log messages.
    Guest contact details are never passed to it.
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.get('extra', {})
        extra.update(self.extra)
        kwargs['extra'] = extra
        return msg, kwargs

    def log_with_context(
        self,
        level: int,
        msg: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        **extra_data
    ):
        """Log with additional structured context."""
        extra = {}
        if entity_type:
            extra['entity_type'] = entity_type
        if entity_id:
            extra['entity_id'] = entity_id
        if extra_data:
            extra['extra_data'] = extra_data

        self.log(level, msg, extra=extra)

    def reservation_created(self, reservation_id: str, check_in: date, check_out: date):
        self.log_with_context(
            logging.INFO,
            f"Reservation created: {check_in} -> {check_out}",
            entity_type="reservation",
            entity_id=reservation_id,
            check_in=check_in,
            check_out=check_out
        )

    def reservation_updated(self, reservation_id: str, check_in: date, check_out: date):
        self.log_with_context(
            logging.INFO,
            f"Reservation updated: {check_in} -> {check_out}",
            entity_type="reservation",
            entity_id=reservation_id,
            check_in=check_in,
            check_out=check_out
        )

    def reservation_cancelled(self, reservation_id: str, released_days: int):
        self.log_with_context(
            logging.INFO,
            f"Reservation cancelled, {released_days} days released",
            entity_type="reservation",
            entity_id=reservation_id,
            released_days=released_days
        )

    def reservation_conflict(self, reservation_id: Optional[str], days: List[date]):
        self.log_with_context(
            logging.WARNING,
            f"Requested period overlaps {len(days)} occupied days",
            entity_type="reservation",
            entity_id=reservation_id,
            occupied_days=[d.isoformat() for d in days]
        )

    def api_request(self, method: str, path: str, status_code: int, duration_ms: float):
        """Log API request with performance data."""
        self.log_with_context(
            logging.INFO,
            f"{method} {path} - {status_code}",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms
        )


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    include_uvicorn: bool = True
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use JSON format (True for production)
        include_uvicorn: Also configure uvicorn loggers
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    # Use JSON formatter for production, simple for development
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    logging.getLogger("campsite").setLevel(log_level)

    if include_uvicorn:
        for logger_name in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
            uvicorn_logger = logging.getLogger(logger_name)
            uvicorn_logger.handlers = [handler]

    # Reduce noise from third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for the given module."""
    base_logger = logging.getLogger(name)
    return StructuredLogger(base_logger, {})


def set_request_context(request_id: str):
    """Set context for the current request."""
    request_id_var.set(request_id)


def clear_request_context():
    request_id_var.set('')
