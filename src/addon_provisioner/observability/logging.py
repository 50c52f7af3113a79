"""Structured logging configuration for the add-on provisioner.

Configures structlog for JSON-formatted, operation-correlated logging.

Usage::

    from addon_provisioner.observability.logging import configure_logging, get_logger

    configure_logging()  # Call once at provider startup
    logger = get_logger(__name__)
    logger.info("addon_provisioned", addon_id="01234567-89ab", app="myapp")
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

import structlog

# Context variable for operation-scoped correlation ID.
operation_id_ctx: ContextVar[str | None] = ContextVar("operation_id", default=None)

_configured = False


def _add_operation_id(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict,
) -> dict:
    """Inject the current operation_id from context into every log entry."""
    oid = operation_id_ctx.get()
    if oid is not None:
        event_dict["operation_id"] = oid
    return event_dict


# Event keys whose values may carry credentials or add-on config.
_SECRET_KEYS = frozenset({"api_key", "authorization", "config"})


def _redact_secrets(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict,
) -> dict:
    for key in _SECRET_KEYS.intersection(event_dict):
        event_dict[key] = "[redacted]"
    return event_dict


def configure_logging(*, level: str = "INFO", json_output: bool = True) -> None:
    """Route structlog through one stderr handler; later calls are no-ops.

    ``level`` and ``json_output`` come from ProviderSettings.
    """
    global _configured
    if _configured:
        return
    _configured = True

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            _add_operation_id,
            _redact_secrets,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # The orchestration engine owns stdout.
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def operation_scope(operation: str) -> Iterator[str]:
    """Bind a fresh operation_id for the duration of one lifecycle call.

    Nested scopes keep the outermost id, so a read performed as part of a
    create logs under the create's id.
    """
    current = operation_id_ctx.get()
    if current is not None:
        yield current
        return

    operation_id = f"{operation}-{uuid.uuid4().hex[:12]}"
    token = operation_id_ctx.set(operation_id)
    try:
        yield operation_id
    finally:
        operation_id_ctx.reset(token)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the given name."""
    return structlog.get_logger(name)
