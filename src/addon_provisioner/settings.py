"""Provider configuration settings.

ProviderSettings is the single configuration object accepted by
configure_provider(). It is a plain dataclass (not env-coupled) so tests can
inject config without touching os.environ.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

DEFAULT_API_URL = "https://api.heroku.com"
DEFAULT_ADDON_CREATE_TIMEOUT_SECONDS = 20 * 60
DEFAULT_ADDON_POLL_INTERVAL_SECONDS = 3.0


@dataclass(frozen=True, slots=True)
class ProviderSettings:
    """Configuration for the add-on provisioner.

    Only api_key has no usable default; validate() reports it when missing.
    """

    # ── Platform API ───────────────────────────────────────────────
    api_key: str = ""
    """Platform API bearer token. Never log this."""

    api_url: str = DEFAULT_API_URL

    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    """Extra headers sent on every API request."""

    request_timeout_seconds: float = 30.0
    max_retries: int = 3

    # ── Add-on lifecycle ───────────────────────────────────────────
    addon_create_timeout_seconds: float = DEFAULT_ADDON_CREATE_TIMEOUT_SECONDS
    """Upper bound on the provisioning wait after an add-on create."""

    addon_poll_interval_seconds: float = DEFAULT_ADDON_POLL_INTERVAL_SECONDS

    # ── Logging ────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool = True

    def validate(self) -> list[str]:
        """Return a list of configuration errors. Empty means valid."""
        errors: list[str] = []
        if not self.api_key:
            errors.append("api_key is required")
        if not self.api_url.startswith(("https://", "http://")):
            errors.append(f"api_url must be an http(s) URL, got {self.api_url!r}")
        if self.request_timeout_seconds <= 0:
            errors.append("request_timeout_seconds must be > 0")
        if self.max_retries < 0:
            errors.append("max_retries must be >= 0")
        if self.addon_create_timeout_seconds <= 0:
            errors.append("addon_create_timeout_seconds must be > 0")
        if self.addon_poll_interval_seconds <= 0:
            errors.append("addon_poll_interval_seconds must be > 0")
        return errors

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ProviderSettings:
        """Build settings from environment variables.

        This is a convenience factory for production use. Tests should
        construct ProviderSettings directly.
        """
        if env is None:
            env = dict(os.environ)

        headers: dict[str, str] = {}
        headers_raw = env.get("HEROKU_HEADERS", "")
        if headers_raw:
            for pair in headers_raw.split(","):
                if "=" in pair:
                    key, value = pair.split("=", 1)
                    headers[key.strip()] = value.strip()

        return cls(
            api_key=env.get("HEROKU_API_KEY", ""),
            api_url=env.get("HEROKU_API_URL", DEFAULT_API_URL).rstrip("/"),
            headers=MappingProxyType(headers),
            request_timeout_seconds=_env_float(env, "HEROKU_REQUEST_TIMEOUT", 30.0),
            max_retries=_env_int(env, "HEROKU_MAX_RETRIES", 3),
            addon_create_timeout_seconds=_env_float(
                env,
                "HEROKU_ADDON_CREATE_TIMEOUT",
                DEFAULT_ADDON_CREATE_TIMEOUT_SECONDS,
            ),
            addon_poll_interval_seconds=_env_float(
                env,
                "HEROKU_ADDON_POLL_INTERVAL",
                DEFAULT_ADDON_POLL_INTERVAL_SECONDS,
            ),
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_json=env.get("LOG_FORMAT", "json") == "json",
        )


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return float(default)
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
