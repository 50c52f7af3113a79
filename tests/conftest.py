"""Pytest configuration for addon_provisioner tests."""
import sys
from pathlib import Path

# Add src/ to path for src-layout imports without an editable install
_PROJECT_ROOT = Path(__file__).parent.parent
_SRC = _PROJECT_ROOT / 'src'
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import pytest

from addon_provisioner.addons import AddonController
from addon_provisioner.inmemory import InMemoryHerokuAPI


@pytest.fixture
def api():
    """In-memory Platform API; new add-ons provision on the second lookup."""
    return InMemoryHerokuAPI(provision_after=1)


@pytest.fixture
def controller(api):
    """Controller with a fast poll interval and short create timeout."""
    return AddonController(api, create_timeout=2.0, poll_interval=0.01)


@pytest.fixture(autouse=True)
def _unconfigured_logging(monkeypatch):
    """Keep structlog at its defaults so capture_logs() sees every event."""
    from addon_provisioner.observability import logging as provisioner_logging

    monkeypatch.setattr(provisioner_logging, '_configured', True)
