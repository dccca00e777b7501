"""Pydantic schemas for aspect matching and wheel geometry."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}([0-9A-Fa-f]{2})?$"


class PointClass(str, Enum):
    """Body class used for orb weighting."""

    LUMINARY = "luminary"
    PERSONAL = "personal"
    SOCIAL = "social"
    OUTER = "outer"
    SENSITIVE_POINT = "sensitive_point"


class Point(BaseModel):
    """An aspectable location on the chart."""

    name: str
    longitude: float
    class_tag: PointClass
    speed_deg_day: float = 0.0

    model_config = {"frozen": True}


class AspectDefinition(BaseModel):
    """One entry of the aspect catalog."""

    label: str
    angle: float = Field(ge=0.0, le=180.0)
    base_orb: float = Field(gt=0.0)
    enabled: bool = True
    color: str = Field(default="#DCDCDCFF", pattern=HEX_COLOR_PATTERN)
    width: float = Field(default=1.5, gt=0.0)

    model_config = {"validate_assignment": True, "extra": "forbid"}


class AspectEdge(BaseModel):
    """Resolved relationship between two points.

    ``definition`` is a snapshot of the matched catalog entry, or None when
    no enabled aspect fits the separation.
    """

    point_a: Point
    point_b: Point
    separation: float
    definition: AspectDefinition | None = None
    orb: float | None = None
    allowed_orb: float | None = None
    applying: bool | None = None

    model_config = {"frozen": True}

    @property
    def matched(self) -> bool:
        return self.definition is not None


class LegendEntry(BaseModel):
    label: str
    angle: float
    color: str
    width: float


class WheelPoint(BaseModel):
    """A projected position on the wheel (y grows downward)."""

    angle: float
    x: float
    y: float


class WheelSegment(BaseModel):
    """A radial line between two rings at one wheel angle."""

    longitude: float
    angle: float
    inner: WheelPoint
    outer: WheelPoint


class SignSegment(BaseModel):
    sign: str
    start_longitude: float
    boundary: WheelSegment
    label: WheelPoint


class HouseCuspMarker(BaseModel):
    house: int
    numeral: str
    longitude: float
    line: WheelSegment
    label: WheelPoint


class AxisLine(BaseModel):
    name: str
    longitude: float
    line: WheelSegment


class PointMarker(BaseModel):
    name: str
    longitude: float
    class_tag: PointClass
    color: str
    marker: WheelPoint
    label: WheelPoint
    line_anchor: WheelPoint


class WheelRadii(BaseModel):
    """Ring radii derived from the wheel diameter."""

    outer: float
    inner: float
    planet: float
    aspect_line: float
    house_number: float
    cusp_tick: float
    major_tick: float
    minor_tick: float
    marker: float
    label_offset: float


class ChartGeometry(BaseModel):
    """Immutable projection of one chart onto a wheel."""

    size: float
    center: WheelPoint
    radii: WheelRadii
    ascendant: float
    descendant: float
    midheaven: float
    imum_coeli: float
    axes: list[AxisLine]
    signs: list[SignSegment]
    ticks: list[WheelSegment]
    cusps: list[HouseCuspMarker]
    points: list[PointMarker]

    model_config = {"frozen": True}

    def marker_for(self, name: str) -> PointMarker | None:
        for marker in self.points:
            if marker.name == name:
                return marker
        return None
