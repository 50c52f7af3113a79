"""Heroku add-on provisioner."""

from .provider import configure_provider
from .settings import ProviderSettings

__all__ = ["configure_provider", "ProviderSettings"]
