"""Integration test configuration."""

import pytest
from natalwheel.config import reset_settings_cache


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def wheel_overrides():
    """Sample stored overrides, as a control panel would persist them."""
    return {
        "orbs": {"global": 1.2, "points": 0.8},
        "points": {"lilith": False},
        "aspects": {
            "Quintile": {"enabled": True},
            "Trine": {"color": "#00C000FF", "width": 2.5},
        },
    }
