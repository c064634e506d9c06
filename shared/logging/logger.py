"""
Logger Implementation
=====================

structlog configuration for the ledger service.

Console output is colored in development and rendered as one JSON object
per line in production. Keys naming credentials or claimant contact
details are redacted before rendering. Ledger transactions bind their
operation and caller so that every entry emitted inside one carries them.

Version: 0.1.0
"""

import datetime
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor


if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger


SERVICE_VERSION = "0.1.0"
REDACTED = "***REDACTED***"

_SENSITIVE_KEYS = ("password", "secret", "token", "authorization", "private_key", "contact")

_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "uvicorn.access")


def _service_context(service_name: str) -> Processor:
    def add_service_context(
        logger: logging.Logger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("version", SERVICE_VERSION)
        return event_dict

    return add_service_context


def _add_timestamp(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    event_dict["timestamp"] = datetime.datetime.now(datetime.UTC).isoformat()
    return event_dict


def _redact(value: Any, key: str = "") -> Any:
    if any(s in key.lower() for s in _SENSITIVE_KEYS):
        return REDACTED
    if isinstance(value, dict):
        return {k: _redact(v, str(k)) for k, v in value.items()}
    return value


def _censor_secrets(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Redact credentials and claimant contact details, recursing into dicts."""
    return {key: _redact(value, key) for key, value in event_dict.items()}


def _build_processors(service_name: str, json_logs: bool) -> tuple[list[Processor], Processor]:
    """Return the shared processor chain and the final renderer."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        _add_timestamp,
        _service_context(service_name),
        _censor_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors.append(structlog.processors.format_exc_info)
        return processors, structlog.processors.JSONRenderer()

    processors.append(structlog.dev.set_exc_info)
    renderer = structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(
            show_locals=False,
            max_frames=10,
        ),
    )
    return processors, renderer


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    service_name: str = "warranty-ledger",
) -> None:
    """
    Configure structlog and route stdlib logging through it.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render JSON lines instead of colored console output
        service_name: Value of the `service` key on every entry
    """
    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    shared_processors, renderer = _build_processors(service_name, json_logs)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)


def get_logger(name: str | None = None) -> "BoundLogger":
    """
    Get a structured logger.

    Example:
        logger = get_logger(__name__)
        logger.info("product_registered", product_id="P1", manufacturer="M")
    """
    return structlog.stdlib.get_logger(name)


@contextmanager
def transaction_context(operation: str, caller: str) -> Iterator[None]:
    """
    Bind `operation` and `caller` for the duration of a ledger transaction.

    Previously bound values are restored on exit.
    """
    with structlog.contextvars.bound_contextvars(operation=operation, caller=caller):
        yield
