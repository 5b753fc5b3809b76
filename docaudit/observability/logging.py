"""Structured logging configuration using structlog.

JSON output for production and console output for development. History
payloads are summarized before rendering so audited document contents
never end up in application logs.
"""

import sys
from collections.abc import Mapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

# Event keys that may carry full documents, selectors or update payloads
PAYLOAD_KEYS: frozenset[str] = frozenset({
    "document",
    "selector",
    "update",
    "snapshot",
})

_LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


class PayloadElider:
    """Processor that replaces payload values with a short summary.

    Mappings become ``{"keys": [...], "size": n}``, sequences become their
    length. Scalars are left untouched.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        for key in PAYLOAD_KEYS.intersection(event_dict):
            event_dict[key] = self._summarize(event_dict[key])
        return event_dict

    def _summarize(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {"keys": sorted(str(k) for k in value), "size": len(value)}
        if isinstance(value, (list, tuple)):
            return {"items": len(value)}
        return value


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    elide_payloads: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        format: "json" for production, "console" for development
        elide_payloads: Whether to summarize document/selector payloads
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if elide_payloads:
        processors.append(PayloadElider())

    if format == "json":
        processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            _LEVELS.get(level.upper(), 20)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance bound to the given name."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
