"""Remote API protocol interface for dependency injection.

The lifecycle controller accepts any implementation matching AddonAPI:
HerokuClient in production, InMemoryHerokuAPI for local runs and tests.
Implementations raise HerokuAPIError (with ``error_id``) on API failures.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class AddonAPI(Protocol):
    """Platform API add-on operations."""

    async def create_addon(
        self,
        app: str,
        plan: str,
        *,
        name: str | None = None,
        config: Mapping[str, str] | None = None,
        confirm: str | None = None,
    ) -> dict[str, Any]: ...

    async def get_addon(self, addon_id: str) -> dict[str, Any]: ...
    async def get_addon_by_app(self, app: str, addon_id: str) -> dict[str, Any]: ...
    async def update_addon(self, app: str, addon_id: str, *, plan: str) -> dict[str, Any]: ...
    async def delete_addon(self, app: str, addon_id: str) -> dict[str, Any]: ...
