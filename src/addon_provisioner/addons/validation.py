"""Custom add-on name validation.

Names follow the Platform API's documented pattern for the optional ``name``
parameter of add-on create. There is no documented length limit; 256
characters is the longest name observed to be accepted.
"""

from __future__ import annotations

import re

from .errors import InvalidAddonName

ADDON_NAME_MAX_LENGTH = 256
ADDON_NAME_PATTERN = r'^[a-zA-Z][A-Za-z0-9_-]+$'

# Used with fullmatch so a trailing newline never matches.
_ADDON_NAME_RE = re.compile(r'[a-zA-Z][A-Za-z0-9_-]+')


def addon_name_violations(name: str) -> list[str]:
    """Return every naming rule ``name`` violates, in rule order."""
    violations: list[str] = []
    if len(name) > ADDON_NAME_MAX_LENGTH:
        violations.append(
            f'Length cannot exceed {ADDON_NAME_MAX_LENGTH} characters'
        )
    if _ADDON_NAME_RE.fullmatch(name) is None:
        violations.append(f'Needs to match this regex: {ADDON_NAME_PATTERN}')
    return violations


def validate_addon_name(name: str) -> None:
    """Raise InvalidAddonName listing all violated rules, if any."""
    violations = addon_name_violations(name)
    if violations:
        raise InvalidAddonName(name, violations)
