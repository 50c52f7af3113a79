"""Custom add-on name validation tests."""

from __future__ import annotations

import pytest

from addon_provisioner.addons.errors import InvalidAddonName
from addon_provisioner.addons.validation import (
    ADDON_NAME_MAX_LENGTH,
    addon_name_violations,
    validate_addon_name,
)

LENGTH_RULE = 'Length cannot exceed 256 characters'
PATTERN_RULE = 'Needs to match this regex: ^[a-zA-Z][A-Za-z0-9_-]+$'


class TestValidNames:
    @pytest.mark.parametrize(
        'name',
        ['my-Addon_1', 'ab', 'Z9', 'cache1', 'a' * ADDON_NAME_MAX_LENGTH],
    )
    def test_accepted(self, name):
        assert addon_name_violations(name) == []
        validate_addon_name(name)


class TestInvalidNames:
    @pytest.mark.parametrize(
        'name',
        ['1bad', '', 'a', '-dash', 'has space', 'dot.name', 'trailing\n', 'ünicode'],
    )
    def test_pattern_violation(self, name):
        assert addon_name_violations(name) == [PATTERN_RULE]

    def test_too_long_but_well_formed(self):
        name = 'a' * (ADDON_NAME_MAX_LENGTH + 1)
        assert addon_name_violations(name) == [LENGTH_RULE]

    def test_every_violated_rule_is_listed(self):
        name = '1' * (ADDON_NAME_MAX_LENGTH + 10)
        with pytest.raises(InvalidAddonName) as exc_info:
            validate_addon_name(name)

        err = exc_info.value
        assert err.violations == (LENGTH_RULE, PATTERN_RULE)
        assert str(err) == (
            'invalid custom add-on name:\n'
            f'-{LENGTH_RULE}\n'
            f'-{PATTERN_RULE}\n'
        )

    def test_is_a_value_error(self):
        with pytest.raises(ValueError, match='invalid custom add-on name'):
            validate_addon_name('1bad')
