"""Add-on resource lifecycle: validation, plan reconciliation, polling, CRUD."""

from .controller import DEFAULT_CREATE_TIMEOUT_SECONDS, AddonController
from .errors import (
    AddonError,
    AddonNotFound,
    AddonProvisioningError,
    AddonRemoteError,
    InvalidAddonName,
)
from .model import (
    DEPROVISIONED,
    DEPROVISIONING,
    PROVISIONED,
    PROVISIONING,
    AddOn,
    AddonResourceData,
)
from .plan import reconcile_plan
from .schema import (
    ADDON_SCHEMA,
    SCHEMA_VERSION,
    FieldSpec,
    changed_fields,
    import_addon,
    migrate_state,
    replacement_fields,
)
from .validation import (
    ADDON_NAME_MAX_LENGTH,
    addon_name_violations,
    validate_addon_name,
)
from .waiter import (
    NotFoundWhileWaiting,
    StateChangeWaiter,
    UnexpectedState,
    WaitError,
    WaitTimeout,
)

__all__ = [
    'ADDON_NAME_MAX_LENGTH',
    'ADDON_SCHEMA',
    'DEFAULT_CREATE_TIMEOUT_SECONDS',
    'DEPROVISIONED',
    'DEPROVISIONING',
    'PROVISIONED',
    'PROVISIONING',
    'SCHEMA_VERSION',
    'AddOn',
    'AddonController',
    'AddonError',
    'AddonNotFound',
    'AddonProvisioningError',
    'AddonRemoteError',
    'AddonResourceData',
    'FieldSpec',
    'InvalidAddonName',
    'NotFoundWhileWaiting',
    'StateChangeWaiter',
    'UnexpectedState',
    'WaitError',
    'WaitTimeout',
    'addon_name_violations',
    'changed_fields',
    'import_addon',
    'migrate_state',
    'reconcile_plan',
    'replacement_fields',
    'validate_addon_name',
]
