"""Structured JSON Logging Configuration

Every record is stamped with the request's correlation id and, on
shop-scoped routes, the shop id, so a service log line can be joined to
the request and tenant that produced it without passing either around.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Optional
from pythonjsonlogger import jsonlogger

from billboard.config import settings

correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
shop_id_var: ContextVar[Optional[str]] = ContextVar("shop_id", default=None)

CONTEXT_FIELDS = ("correlation_id", "shop_id")


class RequestContextFilter(logging.Filter):
    """Copy the bound request context onto records that do not set it via extra"""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "correlation_id", None) is None:
            record.correlation_id = correlation_id_var.get()
        if getattr(record, "shop_id", None) is None:
            record.shop_id = shop_id_var.get()
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter carrying service and request context"""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["environment"] = settings.ENVIRONMENT
        log_record["service"] = settings.APP_NAME

        # Outside a request there is no context to report
        for field in CONTEXT_FIELDS:
            if log_record.get(field) is None:
                log_record.pop(field, None)


def setup_logging() -> None:
    """Configure application logging"""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())

    if settings.LOG_FORMAT == "json":
        formatter = CustomJsonFormatter(
            fmt="%(asctime)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; use as get_logger(__name__)."""
    return logging.getLogger(name)
