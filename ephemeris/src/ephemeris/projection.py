"""Chart projection onto a wheel anchored at the Ascendant.

All parts of the wheel share one angular mapping per chart; only the ring
radius differs between sign boundaries, house cusps and point markers.
Coordinates are screen-space with y growing downward.
"""

from __future__ import annotations

from collections.abc import Sequence

from natalwheel.schemas.wheel import (
    AxisLine,
    ChartGeometry,
    HouseCuspMarker,
    Point,
    PointMarker,
    SignSegment,
    WheelPoint,
    WheelRadii,
    WheelSegment,
)

from ephemeris.angles import normalize_degrees, polar, project_to_wheel_angle
from ephemeris.bodies import ROMAN_NUMERALS, SIGNS, body_color


def wheel_radii(size: float) -> WheelRadii:
    """Ring radii as fractions of the wheel diameter."""
    outer = size * 0.48
    inner = size * 0.33
    planet = size * 0.31
    return WheelRadii(
        outer=outer,
        inner=inner,
        planet=planet,
        aspect_line=planet - size * 0.03,
        house_number=(inner + planet) * 0.5,
        cusp_tick=size * 0.06,
        major_tick=size * 0.03,
        minor_tick=size * 0.015,
        marker=size * 0.012,
        label_offset=size * 0.04,
    )


class _Wheel:
    """Angular mapping and center shared by every element of one chart."""

    def __init__(self, ascendant: float, center: tuple[float, float]) -> None:
        self.ascendant = normalize_degrees(ascendant)
        self.cx, self.cy = center

    def angle(self, longitude: float) -> float:
        return project_to_wheel_angle(longitude, self.ascendant)

    def point(self, longitude: float, radius: float) -> WheelPoint:
        angle = self.angle(longitude)
        x, y = polar(self.cx, self.cy, radius, angle)
        return WheelPoint(angle=angle, x=x, y=y)

    def segment(self, longitude: float, inner: float, outer: float) -> WheelSegment:
        return WheelSegment(
            longitude=longitude,
            angle=self.angle(longitude),
            inner=self.point(longitude, inner),
            outer=self.point(longitude, outer),
        )


def project_chart(
    ascendant: float,
    midheaven: float,
    house_cusps: Sequence[float],
    points: Sequence[Point],
    size: float,
    center: tuple[float, float] | None = None,
) -> ChartGeometry:
    """Project signs, ticks, cusps, axes and points for one chart.

    ``size`` is the wheel diameter; the wheel is centered in a ``size``
    square unless ``center`` is given.
    """
    if size <= 0:
        raise ValueError(f"Wheel size must be positive, got {size}")
    if len(house_cusps) != 12:
        raise ValueError(f"Expected 12 house cusps, got {len(house_cusps)}")

    radii = wheel_radii(size)
    wheel = _Wheel(ascendant, center or (size * 0.5, size * 0.5))

    asc = wheel.ascendant
    dsc = normalize_degrees(asc + 180.0)
    mc = normalize_degrees(midheaven)
    ic = normalize_degrees(mc + 180.0)

    axes = [
        AxisLine(name=name, longitude=lon, line=wheel.segment(lon, radii.inner, radii.outer))
        for name, lon in (("ASC", asc), ("DSC", dsc), ("MC", mc), ("IC", ic))
    ]

    signs = [
        SignSegment(
            sign=sign,
            start_longitude=i * 30.0,
            boundary=wheel.segment(i * 30.0, radii.inner, radii.outer),
            label=wheel.point(i * 30.0 + 15.0, (radii.outer + radii.inner) * 0.5),
        )
        for i, sign in enumerate(SIGNS)
    ]

    ticks = []
    for degree in range(0, 360, 5):
        length = radii.major_tick if degree % 30 == 0 else radii.minor_tick
        ticks.append(wheel.segment(float(degree), radii.outer - length, radii.outer))

    cusps = [
        HouseCuspMarker(
            house=house,
            numeral=ROMAN_NUMERALS[house - 1],
            longitude=lon,
            line=wheel.segment(lon, radii.outer - radii.cusp_tick, radii.outer),
            label=wheel.point(lon, radii.house_number),
        )
        for house, lon in enumerate(house_cusps, start=1)
    ]

    markers = [
        PointMarker(
            name=p.name,
            longitude=p.longitude,
            class_tag=p.class_tag,
            color=body_color(p.name),
            marker=wheel.point(p.longitude, radii.planet),
            label=wheel.point(p.longitude, radii.planet + radii.label_offset),
            line_anchor=wheel.point(p.longitude, radii.aspect_line),
        )
        for p in points
    ]

    return ChartGeometry(
        size=size,
        center=WheelPoint(angle=0.0, x=wheel.cx, y=wheel.cy),
        radii=radii,
        ascendant=asc,
        descendant=dsc,
        midheaven=mc,
        imum_coeli=ic,
        axes=axes,
        signs=signs,
        ticks=ticks,
        cusps=cusps,
        points=markers,
    )
