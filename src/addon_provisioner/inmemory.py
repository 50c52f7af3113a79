"""In-memory Platform API implementation for local development and tests.

Satisfies the AddonAPI protocol and raises the same HerokuAPIError payloads
(``not_found``, ``invalid_params``) as the real API. New add-ons start in
``provisioning`` and report ``provisioned`` after ``provision_after`` lookups.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping

from .addons.model import DEPROVISIONED, PROVISIONED, PROVISIONING
from .providers.heroku_client import NOT_FOUND_ERROR_ID, HerokuAPIError


@dataclass
class _StoredAddon:
    id: str
    app: str
    name: str
    plan: str
    state: str
    config: dict[str, str]
    provider_id: str
    config_vars: list[str]
    lookups: int = 0
    provision_after: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'state': self.state,
            'plan': {'name': self.plan},
            'app': {'name': self.app},
            'provider_id': self.provider_id,
            'config_vars': list(self.config_vars),
        }


@dataclass
class InMemoryHerokuAPI:
    """Dict-backed add-on store with the Platform API's call shapes.

    Attributes:
        provision_after: Lookups of a new add-on that still report
            ``provisioning``.
        default_tiers: Tier appended when a bare service slug is requested,
            keyed by slug (e.g. ``{'heroku-redis': 'mini'}``).
        change_id_on_update: Plan updates return a freshly assigned id.
        calls: Ordered log of (operation, app, addon_id) tuples.
    """

    provision_after: int = 1
    default_tiers: dict[str, str] = field(default_factory=dict)
    change_id_on_update: bool = False
    calls: list[tuple[str, str, str]] = field(default_factory=list)
    _addons: dict[str, _StoredAddon] = field(
        default_factory=dict, init=False, repr=False,
    )

    def state_of(self, addon_id: str) -> str | None:
        stored = self._addons.get(addon_id)
        return stored.state if stored else None

    def set_state(self, addon_id: str, state: str) -> None:
        self._require(addon_id).state = state

    async def create_addon(
        self,
        app: str,
        plan: str,
        *,
        name: str | None = None,
        config: Mapping[str, str] | None = None,
        confirm: str | None = None,
    ) -> dict[str, Any]:
        self.calls.append(('create', app, name or ''))
        if confirm is not None and confirm != app:
            raise HerokuAPIError(
                422,
                'Confirmation did not match app name.',
                error_id='confirmation_required',
            )
        if name and any(a.name == name for a in self._addons.values()):
            raise HerokuAPIError(
                422, f'Name {name} is already taken.', error_id='invalid_params',
            )

        slug, _, tier = plan.partition(':')
        if not tier and slug in self.default_tiers:
            plan = f'{slug}:{self.default_tiers[slug]}'

        addon_id = str(uuid.uuid4())
        stored = _StoredAddon(
            id=addon_id,
            app=app,
            name=name or f'{slug}-{addon_id[:8]}',
            plan=plan,
            state=PROVISIONING if self.provision_after > 0 else PROVISIONED,
            config=dict(config or {}),
            provider_id=f'resource{uuid.uuid4().hex[:12]}@{slug}',
            config_vars=[f'{slug.replace("-", "_").upper()}_URL'],
            provision_after=self.provision_after,
        )
        self._addons[addon_id] = stored
        return stored.to_payload()

    async def get_addon(self, addon_id: str) -> dict[str, Any]:
        self.calls.append(('get', '', addon_id))
        return self._lookup(addon_id).to_payload()

    async def get_addon_by_app(self, app: str, addon_id: str) -> dict[str, Any]:
        self.calls.append(('get_by_app', app, addon_id))
        stored = self._lookup(addon_id)
        if stored.app != app:
            raise _not_found(addon_id)
        return stored.to_payload()

    async def update_addon(self, app: str, addon_id: str, *, plan: str) -> dict[str, Any]:
        self.calls.append(('update', app, addon_id))
        stored = self._require(addon_id, app=app)
        stored.plan = plan
        if self.change_id_on_update:
            del self._addons[addon_id]
            stored.id = str(uuid.uuid4())
            self._addons[stored.id] = stored
        return stored.to_payload()

    async def delete_addon(self, app: str, addon_id: str) -> dict[str, Any]:
        self.calls.append(('delete', app, addon_id))
        stored = self._require(addon_id, app=app)
        del self._addons[addon_id]
        stored.state = DEPROVISIONED
        return stored.to_payload()

    def _lookup(self, addon_id: str) -> _StoredAddon:
        stored = self._require(addon_id)
        if stored.state == PROVISIONING:
            if stored.lookups >= stored.provision_after:
                stored.state = PROVISIONED
            stored.lookups += 1
        return stored

    def _require(self, addon_id: str, *, app: str | None = None) -> _StoredAddon:
        stored = self._addons.get(addon_id)
        if stored is None or (app is not None and stored.app != app):
            raise _not_found(addon_id)
        return stored


def _not_found(addon_id: str) -> HerokuAPIError:
    return HerokuAPIError(
        404,
        f"Couldn't find that add-on: {addon_id}.",
        error_id=NOT_FOUND_ERROR_ID,
    )
