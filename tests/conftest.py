"""Shared fixtures for typed-events tests."""

import pytest

from typed_events.core.config import EventsConfig, set_config
from typed_events.toolkit.misc_toolbox.float_controller import FloatController


@pytest.fixture(autouse=True)
def isolated_globals():
    """Fresh global config and float controller for every test."""
    set_config(EventsConfig())
    FloatController.reset_instance()
    yield
    set_config(None)
    FloatController.reset_instance()
