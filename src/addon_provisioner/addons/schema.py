"""Add-on resource schema, replacement rules, import and state migration."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from ..observability import get_logger
from .model import AddonResourceData

logger = get_logger(__name__)

SCHEMA_VERSION = 1


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Declaration of one resource attribute."""

    type: str
    required: bool = False
    optional: bool = False
    computed: bool = False
    force_new: bool = False


ADDON_SCHEMA: Mapping[str, FieldSpec] = MappingProxyType(
    {
        'app': FieldSpec('string', required=True, force_new=True),
        'plan': FieldSpec('string', required=True),
        'name': FieldSpec('string', optional=True, computed=True, force_new=True),
        'config': FieldSpec('map', optional=True, force_new=True),
        'provider_id': FieldSpec('string', computed=True),
        'config_vars': FieldSpec('list', computed=True),
    }
)

CONFIGURABLE_FIELDS = tuple(
    key for key, spec in ADDON_SCHEMA.items() if spec.required or spec.optional
)


def changed_fields(
    prior: AddonResourceData,
    desired: AddonResourceData,
) -> frozenset[str]:
    """Configurable fields whose desired value differs from the persisted one.

    ``name`` is optional and computed: leaving it unset accepts whatever name
    the platform assigned, so only a configured name can differ.
    """
    changed: set[str] = set()
    if desired.app != prior.app:
        changed.add('app')
    if desired.plan != prior.plan:
        changed.add('plan')
    if desired.name and desired.name != prior.name:
        changed.add('name')
    if (desired.config or {}) != (prior.config or {}):
        changed.add('config')
    return frozenset(changed)


def replacement_fields(
    prior: AddonResourceData,
    desired: AddonResourceData,
) -> list[str]:
    """Changed fields that cannot be updated in place, in schema order."""
    changed = changed_fields(prior, desired)
    return [
        key for key in CONFIGURABLE_FIELDS
        if key in changed and ADDON_SCHEMA[key].force_new
    ]


def import_addon(addon_id: str) -> AddonResourceData:
    """Import passthrough: the id alone is enough for a subsequent read."""
    if not addon_id or not addon_id.strip():
        raise ValueError('addon id is required for import')
    return AddonResourceData(id=addon_id.strip())


def migrate_state(version: int, attributes: Mapping[str, Any]) -> dict[str, Any]:
    """Upgrade persisted attributes to SCHEMA_VERSION.

    Version 0 state has the same shape as version 1 and is accepted unchanged.
    """
    if version < 0 or version > SCHEMA_VERSION:
        raise ValueError(f'unexpected addon schema version: {version}')
    if version == 0:
        logger.info(
            'addon_state_migrated',
            from_version=0,
            to_version=SCHEMA_VERSION,
            addon_id=attributes.get('id'),
        )
    return dict(attributes)
