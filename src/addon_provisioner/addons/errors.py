"""Add-on lifecycle error types."""

from __future__ import annotations

from typing import Sequence


class AddonError(Exception):
    """Base class for add-on lifecycle failures."""

    def __init__(self, message: str, *, addon_id: str | None = None) -> None:
        self.addon_id = addon_id
        super().__init__(message)


class InvalidAddonName(AddonError, ValueError):
    """Raised when a custom add-on name violates one or more naming rules."""

    def __init__(self, name: str, violations: Sequence[str]) -> None:
        self.name = name
        self.violations = tuple(violations)
        lines = ''.join(f'-{violation}\n' for violation in self.violations)
        super().__init__(f'invalid custom add-on name:\n{lines}')


class AddonNotFound(AddonError):
    """The add-on no longer exists remotely; callers should prune it."""

    def __init__(self, addon_id: str) -> None:
        super().__init__(f'addon {addon_id!r} not found', addon_id=addon_id)


class AddonRemoteError(AddonError):
    """A remote call failed; the message carries the operation context."""

    def __init__(self, operation: str, cause: Exception, *, addon_id: str | None = None) -> None:
        self.operation = operation
        super().__init__(f'error {operation}: {cause}', addon_id=addon_id)


class AddonProvisioningError(AddonError):
    """Waiting for a newly created add-on to reach ``provisioned`` failed.

    The add-on exists remotely at this point; ``addon_id`` is populated so
    the caller can read or delete the partially created resource.
    """

    def __init__(self, addon_id: str, cause: Exception, *, is_timeout: bool) -> None:
        self.is_timeout = is_timeout
        super().__init__(
            f'error waiting for addon ({addon_id}) to be provisioned: {cause}',
            addon_id=addon_id,
        )
