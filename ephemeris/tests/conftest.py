"""Ephemeris test configuration."""

import pytest
from natalwheel.config import reset_settings_cache
from natalwheel.schemas.natal import BodyPosition, ChartSnapshot
from natalwheel.services.wheel_settings import WheelSettings

SAMPLE_LONGITUDES = {
    "Sun": 10.0,
    "Moon": 190.0,
    "Mercury": 28.0,
    "Venus": 75.0,
    "Mars": 250.0,
    "Jupiter": 130.0,
    "Saturn": 300.0,
    "Uranus": 200.0,
    "Neptune": 270.0,
    "Pluto": 215.0,
    "True Node": 100.0,
    "Chiron": 160.0,
    "Lilith": 340.0,
}


def make_chart(longitudes: dict[str, float] | None = None, **kwargs) -> ChartSnapshot:
    longitudes = SAMPLE_LONGITUDES if longitudes is None else longitudes
    bodies = [
        BodyPosition(name=name, longitude=lon, speed_deg_day=1.0)
        for name, lon in longitudes.items()
    ]
    fields = {
        "bodies": bodies,
        "house_cusps": [(15.0 + 30.0 * i) % 360.0 for i in range(12)],
        "ascendant": 15.0,
        "midheaven": 285.0,
    }
    fields.update(kwargs)
    return ChartSnapshot(**fields)


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def sample_chart() -> ChartSnapshot:
    """A chart with every natal body and equal houses from 15 Aries."""
    return make_chart()


@pytest.fixture
def wheel_settings() -> WheelSettings:
    return WheelSettings()


@pytest.fixture
def chart_factory():
    """Build charts from a name -> longitude mapping."""
    return make_chart
