"""Add-on data model.

``AddOn`` is the normalized remote object returned by the Platform API.
``AddonResourceData`` is the per-resource record exchanged with the
orchestration engine: the user's configured values going in, the persisted
canonical values coming out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

PROVISIONING = 'provisioning'
PROVISIONED = 'provisioned'
DEPROVISIONING = 'deprovisioning'
DEPROVISIONED = 'deprovisioned'


@dataclass(frozen=True, slots=True)
class AddOn:
    """Snapshot of one add-on as reported by the Platform API.

    ``state`` is kept as the raw label; only ``provisioning`` and
    ``provisioned`` carry meaning for the lifecycle controller.
    """

    id: str
    name: str
    state: str
    plan_name: str
    app_name: str
    provider_id: str = ''
    config_vars: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> AddOn:
        plan = payload.get('plan') or {}
        app = payload.get('app') or {}
        return cls(
            id=str(payload.get('id') or ''),
            name=str(payload.get('name') or ''),
            state=str(payload.get('state') or ''),
            plan_name=str(plan.get('name') or ''),
            app_name=str(app.get('name') or ''),
            provider_id=str(payload.get('provider_id') or ''),
            config_vars=tuple(payload.get('config_vars') or ()),
        )


@dataclass(slots=True)
class AddonResourceData:
    """Configured and persisted fields of one add-on resource.

    The engine fills ``app``, ``plan``, ``name`` and ``config`` from the user's
    configuration and lists in ``changed`` the fields that differ from the
    last read. The controller writes ``id`` and the computed fields.
    """

    app: str = ''
    plan: str = ''
    name: str = ''
    config: dict[str, str] | None = None
    id: str = ''
    provider_id: str = ''
    config_vars: list[str] = field(default_factory=list)
    changed: frozenset[str] = frozenset()

    def has_change(self, key: str) -> bool:
        return key in self.changed

    def set_id(self, addon_id: str) -> None:
        self.id = addon_id

    def apply(self, addon: AddOn, *, plan: str) -> None:
        """Persist a read-back remote snapshot."""
        self.name = addon.name
        self.app = addon.app_name
        self.plan = plan
        self.provider_id = addon.provider_id
        self.config_vars = list(addon.config_vars)
        self.changed = frozenset()
