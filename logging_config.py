from __future__ import annotations

import logging
import time
from logging.config import dictConfig
from typing import Any, Iterable, Sequence

from settings import get_settings

CONTEXT_KEYS = (
    "item_id",
    "scan_id",
    "realm",
    "faction",
    "unit",
    "trim_pct",
    "bins",
    "point_count",
    "row_count",
    "processing_ms",
    "timeout_s",
    "reason",
)

_configured = False


class ContextualFormatter(logging.Formatter):
    """Append known ``extra`` fields to each line as ``key=value`` pairs."""

    converter = time.gmtime

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        context_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._context_keys: Sequence[str] = tuple(context_keys or CONTEXT_KEYS)

    def context_of(self, record: logging.LogRecord) -> dict[str, Any]:
        context: dict[str, Any] = {}
        for key in self._context_keys:
            value = getattr(record, key, None)
            if value is not None:
                context[key] = value
        return context

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = self.context_of(record)
        if not context:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        head, sep, trace = message.partition("\n")
        return f"{head} | {pairs}{sep}{trace}"


def configure_logging(level: str | int | None = None) -> None:
    """Install the contextual stream handler on the root logger once."""
    global _configured
    if _configured:
        return

    log_level = level if level is not None else get_settings().log_level

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": "logging_config.ContextualFormatter",
                    "fmt": "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "context_keys": list(CONTEXT_KEYS),
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "contextual",
                }
            },
            "root": {"handlers": ["default"], "level": log_level},
        }
    )

    _configured = True
