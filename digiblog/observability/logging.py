"""JSON logging with request correlation ids."""

from __future__ import annotations

import logging
from logging.config import dictConfig

from asgi_correlation_id.context import correlation_id
from pythonjsonlogger import jsonlogger

_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s %(correlation_id)s"


class CorrelationIdFilter(logging.Filter):
    """Stamp each record with the X-Request-ID of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id.get() or "-"
        return True


def configure_logging(
    level: str = "INFO", fmt: str = "json", sql_echo: bool = False
) -> None:
    """Route application, uvicorn and SQL logs through one handler.

    Args:
        level: Root log level name
        fmt: ``json`` for structured output, ``text`` for local reading
        sql_echo: Log every SQL statement at INFO
    """
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"correlation": {"()": CorrelationIdFilter}},
            "formatters": {
                "json": {
                    "()": jsonlogger.JsonFormatter,
                    "fmt": _FIELDS,
                    "rename_fields": {"asctime": "time", "levelname": "level"},
                },
                "text": {
                    "format": "%(asctime)s %(levelname)-7s [%(correlation_id)s] "
                    "%(name)s: %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "text" if fmt == "text" else "json",
                    "filters": ["correlation"],
                }
            },
            "root": {"handlers": ["console"], "level": level},
            "loggers": {
                "digiblog": {"level": level},
                "uvicorn.access": {
                    "handlers": ["console"],
                    "level": level,
                    "propagate": False,
                },
                "sqlalchemy.engine": {
                    "level": "INFO" if sql_echo else "WARNING",
                },
            },
        }
    )
