"""Provider factory wiring settings, logging, API client and controller.

Usage:
    # Production
    async with configure_provider(ProviderSettings.from_env()) as controller:
        ...

    # Several controllers against one account
    lock = asyncio.Lock()
    first = configure_provider(settings, create_lock=lock)
    second = configure_provider(settings, create_lock=lock)

    # Testing (full DI control)
    controller = configure_provider(settings, client=InMemoryHerokuAPI())
"""

from __future__ import annotations

import asyncio

import httpx

from .addons.controller import AddonController
from .observability import configure_logging, get_logger
from .protocols import AddonAPI
from .providers.heroku_client import HerokuClient
from .settings import ProviderSettings

logger = get_logger(__name__)


class ProviderConfigError(ValueError):
    """Raised when ProviderSettings.validate() reports errors."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__('invalid provider configuration: ' + '; '.join(errors))


def configure_provider(
    settings: ProviderSettings,
    *,
    client: AddonAPI | None = None,
    http_client: httpx.AsyncClient | None = None,
    create_lock: asyncio.Lock | None = None,
) -> AddonController:
    """Build an AddonController from settings.

    Controllers built for the same account must be given the same
    ``create_lock``; without one, the controller gets a lock of its own.
    An asyncio.Lock serves a single event loop, so share it only between
    controllers driven from that loop.

    When ``client`` is given, API credentials are not required. Otherwise
    the controller owns a HerokuClient; close it with ``aclose()`` (or use
    the controller as an async context manager). An injected
    ``http_client`` is left open.
    """
    configure_logging(level=settings.log_level, json_output=settings.log_json)

    errors = settings.validate()
    if client is not None:
        errors = [e for e in errors if not e.startswith('api_key')]
    if errors:
        raise ProviderConfigError(errors)

    if client is None:
        client = HerokuClient(
            api_key=settings.api_key,
            base_url=settings.api_url,
            headers=settings.headers,
            http_client=http_client,
            timeout_seconds=settings.request_timeout_seconds,
            max_retries=settings.max_retries,
        )

    logger.debug(
        'provider_configured',
        api_url=settings.api_url,
        create_timeout=settings.addon_create_timeout_seconds,
        poll_interval=settings.addon_poll_interval_seconds,
        shared_lock=create_lock is not None,
    )
    return AddonController(
        client,
        create_lock=create_lock,
        create_timeout=settings.addon_create_timeout_seconds,
        poll_interval=settings.addon_poll_interval_seconds,
    )
