"""Pydantic schemas for computed natal chart data."""

from __future__ import annotations

from pydantic import BaseModel, Field

from natalwheel.schemas.wheel import AspectEdge, ChartGeometry, LegendEntry, Point


class BodyPosition(BaseModel):
    """Ephemeris result for a single body."""

    name: str
    longitude: float
    latitude: float = 0.0
    speed_deg_day: float = 0.0
    retrograde: bool = False
    house: int | None = None


class ChartCoordinates(BaseModel):
    latitude: float
    longitude: float


class ChartMetadata(BaseModel):
    ephemeris_engine: str = "swisseph"
    zodiac: str = "tropical"
    house_system_requested: str = "placidus"
    house_system_applied: str = "placidus"
    house_system_code: str = "P"
    datetime_utc: str
    timezone: str = "UTC"
    coordinates: ChartCoordinates
    julian_day_ut: float
    position_sources: dict[str, str] = Field(default_factory=dict)
    unavailable_bodies: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ChartSnapshot(BaseModel):
    """Body positions and houses for one chart instant.

    ``node_longitude`` may be given explicitly; otherwise the node is looked
    up by name among ``bodies``.
    """

    bodies: list[BodyPosition]
    house_cusps: list[float] = Field(min_length=12, max_length=12)
    ascendant: float
    midheaven: float
    node_longitude: float | None = None
    house_system: str = "placidus"
    metadata: ChartMetadata | None = None

    model_config = {"frozen": True}

    def body(self, name: str) -> BodyPosition | None:
        """Return the body result with exactly this name, if present."""
        for body in self.bodies:
            if body.name == name:
                return body
        return None


class NatalWheel(BaseModel):
    """Everything a renderer needs for one chart: points, aspects and geometry."""

    chart: ChartSnapshot
    points: list[Point]
    aspects: list[AspectEdge]
    legend: list[LegendEntry] = Field(default_factory=list)
    geometry: ChartGeometry

    model_config = {"frozen": True}

    @property
    def matched_aspects(self) -> list[AspectEdge]:
        return [edge for edge in self.aspects if edge.matched]
