"""Natal chart calculator - body positions, houses, aspects and wheel geometry."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import swisseph as swe
from natalwheel.config import get_settings
from natalwheel.schemas.natal import (
    BodyPosition,
    ChartCoordinates,
    ChartMetadata,
    ChartSnapshot,
    NatalWheel,
)
from natalwheel.services.wheel_settings import WheelSettings

from ephemeris.angles import normalize_degrees
from ephemeris.aspects import aspect_legend, resolve_aspects
from ephemeris.bodies import BODY_IDS, NATAL_BODIES, format_longitude
from ephemeris.points import assemble_points
from ephemeris.projection import project_chart
from ephemeris.timezones import ConversionStatus, local_to_utc, parse_wall_clock

logger = logging.getLogger(__name__)

_ephe_path = get_settings().swisseph_ephe_path.strip()
swe.set_ephe_path(_ephe_path if _ephe_path else None)


HOUSE_SYSTEMS: dict[str, bytes] = {
    "placidus": b"P",
    "whole_sign": b"W",
    "equal": b"E",
    "koch": b"K",
    "porphyry": b"O",
}

ZODIAC_MODE = "tropical"


def _datetime_to_jd(dt: datetime) -> float:
    """Convert datetime to Julian Day number (UT)."""
    utc = dt.astimezone(UTC)
    return swe.julday(
        utc.year,
        utc.month,
        utc.day,
        utc.hour + utc.minute / 60.0 + (utc.second + utc.microsecond / 1e6) / 3600.0,
    )


def _calculate_position(body_name: str, jd: float) -> tuple[BodyPosition | None, str, str | None]:
    """Calculate position for a single body.

    Returns (position, source, warning). Position can be None when unavailable.
    """
    body_id = BODY_IDS[body_name]

    try:
        result, _ = swe.calc_ut(jd, body_id, swe.FLG_SWIEPH | swe.FLG_SPEED)
        source = "swisseph"
    except Exception:
        # Moshier needs no ephemeris files but has no asteroids
        try:
            result, _ = swe.calc_ut(jd, body_id, swe.FLG_MOSEPH | swe.FLG_SPEED)
            source = "moshier"
        except Exception as exc:
            return None, "unavailable", f"{body_name} unavailable: {exc}"

    speed = result[3]
    return (
        BodyPosition(
            name=body_name,
            longitude=normalize_degrees(result[0]),
            latitude=result[1],
            speed_deg_day=speed,
            retrograde=speed < 0,
        ),
        source,
        None,
    )


def _calculate_houses(
    jd: float, latitude: float, longitude: float, hsys: bytes
) -> tuple[list[float], float, float, str | None]:
    """House cusps, Ascendant and Midheaven; equal houses from 0 Aries on failure."""
    try:
        cusp_result, angle_result = swe.houses_ex(jd, latitude, longitude, hsys)
    except Exception as exc:
        cusps = [i * 30.0 for i in range(12)]
        return cusps, cusps[0], cusps[9], f"house calculation failed, fallback equal houses: {exc}"
    cusps = [normalize_degrees(c) for c in list(cusp_result)[:12]]
    return cusps, normalize_degrees(angle_result[0]), normalize_degrees(angle_result[1]), None


def find_house(longitude: float, cusps: list[float]) -> int:
    """Determine which house a planet falls in given house cusps."""
    if not cusps or len(cusps) < 12:
        return 1
    for i in range(12):
        cusp_start = cusps[i]
        cusp_end = cusps[(i + 1) % 12]
        if cusp_start <= cusp_end:
            if cusp_start <= longitude < cusp_end:
                return i + 1
        else:
            # Wraps around 0 degrees
            if longitude >= cusp_start or longitude < cusp_end:
                return i + 1
    return 1


def calculate_chart_snapshot(
    moment: datetime,
    latitude: float,
    longitude: float,
    house_system: str | None = None,
    timezone_name: str = "UTC",
) -> ChartSnapshot:
    """Compute bodies and houses for one instant and place.

    Naive datetimes are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    moment_utc = moment.astimezone(UTC)
    jd = _datetime_to_jd(moment_utc)
    warnings: list[str] = []

    requested = str(house_system or get_settings().house_system).strip().lower() or "placidus"
    hsys = HOUSE_SYSTEMS.get(requested, b"P")
    applied = requested if requested in HOUSE_SYSTEMS else "placidus"
    if requested not in HOUSE_SYSTEMS:
        warnings.append(f"unknown house system '{house_system}', fallback to placidus")

    cusps, ascendant, midheaven, house_warning = _calculate_houses(jd, latitude, longitude, hsys)
    if house_warning:
        warnings.append(house_warning)

    bodies: list[BodyPosition] = []
    position_sources: dict[str, str] = {}
    unavailable: list[str] = []
    for body_name in NATAL_BODIES:
        position, source, warning = _calculate_position(body_name, jd)
        position_sources[body_name] = source
        if warning:
            warnings.append(warning)
        if position is None:
            unavailable.append(body_name)
            continue
        bodies.append(position.model_copy(update={"house": find_house(position.longitude, cusps)}))

    for warning in warnings:
        logger.warning("Chart %s: %s", moment_utc.isoformat(), warning)

    metadata = ChartMetadata(
        zodiac=ZODIAC_MODE,
        house_system_requested=requested,
        house_system_applied=applied,
        house_system_code=hsys.decode("ascii"),
        datetime_utc=moment_utc.isoformat(),
        timezone=timezone_name,
        coordinates=ChartCoordinates(
            latitude=round(float(latitude), 6), longitude=round(float(longitude), 6)
        ),
        julian_day_ut=round(float(jd), 8),
        position_sources=position_sources,
        unavailable_bodies=sorted(set(unavailable)),
        warnings=warnings,
    )
    return ChartSnapshot(
        bodies=bodies,
        house_cusps=cusps,
        ascendant=ascendant,
        midheaven=midheaven,
        house_system=applied,
        metadata=metadata,
    )


def build_natal_wheel(
    chart: ChartSnapshot,
    settings: WheelSettings | None = None,
    wheel_size: float | None = None,
    center: tuple[float, float] | None = None,
) -> NatalWheel:
    """Assemble points, resolve aspects and project the wheel for a chart."""
    settings = settings or WheelSettings()
    size = wheel_size or get_settings().wheel_size
    points = assemble_points(chart, settings.points)
    return NatalWheel(
        chart=chart,
        points=points,
        aspects=resolve_aspects(points, settings),
        legend=aspect_legend(settings.aspects),
        geometry=project_chart(
            chart.ascendant, chart.midheaven, chart.house_cusps, points, size, center
        ),
    )


def calculate_natal_chart(
    birth: datetime | str,
    latitude: float,
    longitude: float,
    timezone_name: str | None = None,
    house_system: str | None = None,
    settings: WheelSettings | None = None,
    wheel_size: float | None = None,
) -> NatalWheel:
    """Compute a full natal wheel from a wall-clock birth time.

    ``birth`` is local time in ``timezone_name`` (default from settings).
    Raises ValueError for an unparseable time, an unknown zone or a
    wall-clock time skipped by a daylight-saving change. An ambiguous time
    uses the earlier instant and records a warning.
    """
    local = parse_wall_clock(birth) if isinstance(birth, str) else birth
    tzid = timezone_name or get_settings().timezone
    conversion = local_to_utc(tzid, local)
    if conversion.utc is None:
        raise ValueError(conversion.detail)

    chart = calculate_chart_snapshot(
        conversion.utc, latitude, longitude, house_system=house_system, timezone_name=tzid
    )
    if conversion.status == ConversionStatus.AMBIGUOUS_LOCAL_TIME and chart.metadata is not None:
        logger.warning("%s; using the earlier instant", conversion.detail)
        metadata = chart.metadata.model_copy(
            update={"warnings": [*chart.metadata.warnings, conversion.detail]}
        )
        chart = chart.model_copy(update={"metadata": metadata})

    logger.info(
        "Computed chart for %s (%s) at %.4f, %.4f",
        conversion.utc.isoformat(),
        tzid,
        latitude,
        longitude,
    )
    return build_natal_wheel(chart, settings=settings, wheel_size=wheel_size)


def chart_summary(wheel: NatalWheel, ascii_degrees: bool = False) -> dict[str, Any]:
    """Plain-data summary of a wheel for printing or serialization."""
    chart = wheel.chart
    return {
        "bodies": [
            {
                "name": b.name,
                "longitude": format_longitude(b.longitude, ascii_degrees),
                "retrograde": b.retrograde,
                "house": b.house,
            }
            for b in chart.bodies
        ],
        "houses": [
            {"house": i, "cusp": format_longitude(c, ascii_degrees)}
            for i, c in enumerate(chart.house_cusps, start=1)
        ],
        "angles": {
            "ascendant": format_longitude(chart.ascendant, ascii_degrees),
            "midheaven": format_longitude(chart.midheaven, ascii_degrees),
        },
        "aspects": [
            {
                "point_a": e.point_a.name,
                "point_b": e.point_b.name,
                "type": e.definition.label,
                "orb_degrees": round(e.orb, 4),
                "applying": e.applying,
            }
            for e in wheel.matched_aspects
            if e.definition is not None and e.orb is not None
        ],
    }
