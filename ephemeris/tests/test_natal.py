"""Tests for natal chart calculations."""

from __future__ import annotations

from datetime import UTC, datetime

import ephemeris.__main__ as cli
import ephemeris.natal as natal
import pytest
from ephemeris.bodies import BODY_IDS
from natalwheel.config import reset_settings_cache
from natalwheel.services.wheel_settings import WheelSettings

CUSPS = tuple((15.0 + 30.0 * i) % 360.0 for i in range(12))
NAMES_BY_ID = {body_id: name for name, body_id in BODY_IDS.items()}
LONGITUDES = {
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


class FakeSwe:
    FLG_SWIEPH = 1
    FLG_SPEED = 2
    FLG_MOSEPH = 4

    def __init__(self, missing=(15,), no_files=(), houses_fail=False):
        self.missing = set(missing)
        self.no_files = set(no_files)
        self.houses_fail = houses_fail
        self.julday_calls = []

    def set_ephe_path(self, path):
        pass

    def julday(self, year, month, day, hour):
        self.julday_calls.append((year, month, day, hour))
        return 2450000.5

    def calc_ut(self, jd: float, body_id: int, flags: int):
        if body_id in self.missing:
            raise RuntimeError("missing ephemeris file")
        if body_id in self.no_files and flags & self.FLG_SWIEPH:
            raise RuntimeError("swisseph file not found")
        name = NAMES_BY_ID[body_id]
        speed = -0.05 if name == "Saturn" else 1.0
        return (LONGITUDES[name], 0.5, 1.0, speed, 0.0, 0.0), flags

    def houses_ex(self, jd, latitude, longitude, hsys):
        if self.houses_fail:
            raise RuntimeError("latitude too high")
        return CUSPS, (15.0, 285.0, 0.0, 0.0)


@pytest.fixture
def fake_swe(monkeypatch):
    fake = FakeSwe()
    monkeypatch.setattr(natal, "swe", fake)
    return fake


def test_find_house():
    cusps = list(CUSPS)
    assert natal.find_house(20.0, cusps) == 1
    assert natal.find_house(15.0, cusps) == 1
    assert natal.find_house(190.0, cusps) == 6
    # house XII wraps past 0 Aries
    assert natal.find_house(350.0, cusps) == 12
    assert natal.find_house(10.0, cusps) == 12
    assert natal.find_house(10.0, []) == 1


def test_snapshot_bodies_and_metadata(fake_swe):
    chart = natal.calculate_chart_snapshot(
        datetime(1996, 2, 12, 16, 20, tzinfo=UTC), 51.5, -0.12, house_system="placidus"
    )
    names = [b.name for b in chart.bodies]
    assert names[0] == "Sun"
    assert "Chiron" not in names
    assert len(names) == len(BODY_IDS) - 1

    assert chart.body("Saturn").retrograde is True
    assert chart.body("Sun").retrograde is False
    assert chart.body("Sun").house == 12
    assert chart.body("Moon").house == 6
    assert chart.ascendant == 15.0
    assert chart.midheaven == 285.0
    assert chart.house_cusps == list(CUSPS)

    metadata = chart.metadata
    assert metadata.zodiac == "tropical"
    assert metadata.house_system_code == "P"
    assert metadata.datetime_utc == "1996-02-12T16:20:00+00:00"
    assert metadata.coordinates.latitude == 51.5
    assert metadata.unavailable_bodies == ["Chiron"]
    assert metadata.position_sources["Chiron"] == "unavailable"
    assert metadata.position_sources["Sun"] == "swisseph"
    assert any("Chiron unavailable" in w for w in metadata.warnings)


def test_naive_moment_is_utc(fake_swe):
    natal.calculate_chart_snapshot(datetime(2000, 1, 1, 12, 30), 0.0, 0.0)
    assert fake_swe.julday_calls[-1] == (2000, 1, 1, 12.5)


def test_moshier_fallback(monkeypatch):
    monkeypatch.setattr(natal, "swe", FakeSwe(missing=(), no_files=(9,)))
    chart = natal.calculate_chart_snapshot(datetime(2000, 1, 1, tzinfo=UTC), 0.0, 0.0)
    assert chart.metadata.position_sources["Pluto"] == "moshier"
    assert chart.body("Pluto").longitude == 215.0
    assert chart.metadata.unavailable_bodies == []


def test_calculate_position_returns_unavailable_when_ephemeris_fails(fake_swe):
    position, source, warning = natal._calculate_position("Chiron", 2460000.5)
    assert position is None
    assert source == "unavailable"
    assert warning and "unavailable" in warning


def test_unknown_house_system_falls_back(fake_swe):
    chart = natal.calculate_chart_snapshot(
        datetime(2000, 1, 1, tzinfo=UTC), 0.0, 0.0, house_system="Regiomontanus"
    )
    assert chart.house_system == "placidus"
    assert chart.metadata.house_system_requested == "regiomontanus"
    assert chart.metadata.house_system_code == "P"
    assert any("fallback to placidus" in w for w in chart.metadata.warnings)


def test_house_failure_uses_equal_houses(monkeypatch):
    monkeypatch.setattr(natal, "swe", FakeSwe(houses_fail=True))
    chart = natal.calculate_chart_snapshot(datetime(2000, 1, 1, tzinfo=UTC), 89.9, 0.0)
    assert chart.house_cusps == [i * 30.0 for i in range(12)]
    assert chart.ascendant == 0.0
    assert chart.midheaven == 270.0
    assert any("fallback equal houses" in w for w in chart.metadata.warnings)


def test_build_natal_wheel(sample_chart):
    wheel = natal.build_natal_wheel(sample_chart, wheel_size=500.0)
    assert len(wheel.points) == 15
    assert len(wheel.aspects) == 15 * 14 // 2
    assert [e.label for e in wheel.legend][0] == "Conjunction"
    assert wheel.geometry.size == 500.0
    assert wheel.geometry.center.x == 250.0
    assert all(e.matched for e in wheel.matched_aspects)


def test_build_natal_wheel_respects_settings(sample_chart):
    settings = WheelSettings()
    settings.set_point("node", False)
    settings.aspects.set_enabled("Opposition", False)
    wheel = natal.build_natal_wheel(sample_chart, settings=settings, wheel_size=500.0)
    assert "True Node" not in [p.name for p in wheel.points]
    assert "Opposition" not in [e.definition.label for e in wheel.matched_aspects]


def test_build_natal_wheel_default_size(sample_chart, monkeypatch):
    monkeypatch.setenv("WHEEL_SIZE", "400")
    reset_settings_cache()
    wheel = natal.build_natal_wheel(sample_chart)
    assert wheel.geometry.size == 400.0


def test_calculate_natal_chart_from_wall_clock(fake_swe):
    wheel = natal.calculate_natal_chart(
        "1996-02-12 16:20", 51.5, -0.12, timezone_name="Europe/London"
    )
    metadata = wheel.chart.metadata
    assert metadata.datetime_utc == "1996-02-12T16:20:00+00:00"
    assert metadata.timezone == "Europe/London"
    pairs = {(e.point_a.name, e.point_b.name): e.definition.label for e in wheel.matched_aspects}
    assert pairs[("Sun", "Moon")] == "Opposition"


def test_calculate_natal_chart_unknown_timezone(fake_swe):
    with pytest.raises(ValueError, match="Unknown time zone"):
        natal.calculate_natal_chart("2000-01-01 12:00", 0.0, 0.0, timezone_name="Nowhere/Special")


def test_calculate_natal_chart_nonexistent_time(fake_swe):
    with pytest.raises(ValueError, match="does not exist"):
        natal.calculate_natal_chart(
            "2021-03-14 02:30", 40.7, -74.0, timezone_name="America/New_York"
        )


def test_calculate_natal_chart_ambiguous_time_warns(fake_swe):
    wheel = natal.calculate_natal_chart(
        datetime(2021, 11, 7, 1, 30), 40.7, -74.0, timezone_name="America/New_York"
    )
    metadata = wheel.chart.metadata
    assert metadata.datetime_utc == "2021-11-07T05:30:00+00:00"
    assert any("twice" in w for w in metadata.warnings)


def test_chart_summary(sample_chart):
    wheel = natal.build_natal_wheel(sample_chart, wheel_size=500.0)
    summary = natal.chart_summary(wheel, ascii_degrees=True)
    assert summary["angles"]["ascendant"] == "Aries 15 deg 00' 0.00\""
    assert len(summary["houses"]) == 12
    assert summary["bodies"][0]["name"] == "Sun"
    first = summary["aspects"][0]
    assert set(first) == {"point_a", "point_b", "type", "orb_degrees", "applying"}


def test_cli_prints_chart(fake_swe, capsys):
    code = cli.main(["1996-02-12 16:20", "--lat", "51.5", "--lon", "-0.12", "--tz", "Europe/London"])
    assert code == 0
    out = capsys.readouterr().out
    assert "Planets:" in out
    assert "Saturn" in out and "[R]" in out
    assert "Sun Opposition Moon" in out


def test_cli_reports_errors(fake_swe, capsys):
    code = cli.main(["2000-01-01 12:00", "--lat", "0", "--lon", "0", "--tz", "Nowhere/Special"])
    assert code == 1
    assert "ERROR: Unknown time zone" in capsys.readouterr().err
