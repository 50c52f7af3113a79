"""Observability infrastructure for the add-on provisioner.

Quick start::

    from addon_provisioner.observability import configure_logging, get_logger

    configure_logging()
    logger = get_logger(__name__)
"""

from .logging import configure_logging, get_logger, operation_id_ctx, operation_scope

__all__ = [
    "configure_logging",
    "get_logger",
    "operation_id_ctx",
    "operation_scope",
]
