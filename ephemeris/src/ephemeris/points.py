"""Assembly of the aspectable point set for a computed chart."""

from __future__ import annotations

import logging

from natalwheel.schemas.natal import ChartSnapshot
from natalwheel.schemas.wheel import Point, PointClass
from natalwheel.services.wheel_settings import PointInclusion

from ephemeris.bodies import (
    ASCENDANT,
    CHIRON,
    LILITH,
    MIDHEAVEN,
    NODE_NAMES,
    classify_body,
)

logger = logging.getLogger(__name__)

# Body results that only join the point set through their inclusion flag
GATED_BODIES = frozenset((CHIRON, LILITH))


class DuplicatePointName(ValueError):
    """Two assembled points share a name: the chart input is inconsistent."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Duplicate point name '{name}' in assembled chart points")
        self.name = name


def _node_source(chart: ChartSnapshot) -> str | None:
    """Name of the body the node point is taken from, if any."""
    if chart.node_longitude is not None:
        return NODE_NAMES[0]
    for name in NODE_NAMES:
        if chart.body(name) is not None:
            return name
    return None


def _node_point(chart: ChartSnapshot) -> Point | None:
    """Node by explicit value, else by name lookup (never by list position)."""
    name = _node_source(chart)
    if name is None:
        return None
    if chart.node_longitude is not None:
        return Point(
            name=name,
            longitude=chart.node_longitude,
            class_tag=PointClass.SENSITIVE_POINT,
        )
    body = chart.body(name)
    return Point(
        name=body.name,
        longitude=body.longitude,
        class_tag=PointClass.SENSITIVE_POINT,
        speed_deg_day=body.speed_deg_day,
    )


def _body_point(chart: ChartSnapshot, name: str) -> Point | None:
    body = chart.body(name)
    if body is None:
        return None
    return Point(
        name=body.name,
        longitude=body.longitude,
        class_tag=classify_body(body.name),
        speed_deg_day=body.speed_deg_day,
    )


def assemble_points(chart: ChartSnapshot, inclusion: PointInclusion | None = None) -> list[Point]:
    """Build the ordered aspectable points: bodies first, then sensitive points.

    The node body (True Node, else Mean Node), Chiron and Lilith are emitted
    only through their inclusion flag, so each appears at most once: turning
    a flag off removes that body's point itself. Any other node body stays an
    ordinary point. Raises DuplicatePointName when the chart itself carries
    two bodies with the same name.
    """
    inclusion = inclusion or PointInclusion()
    node_name = _node_source(chart)
    gated = GATED_BODIES | {node_name} if node_name else GATED_BODIES
    points = [
        Point(
            name=body.name,
            longitude=body.longitude,
            class_tag=classify_body(body.name),
            speed_deg_day=body.speed_deg_day,
        )
        for body in chart.bodies
        if body.name not in gated
    ]

    if inclusion.asc:
        points.append(
            Point(name=ASCENDANT, longitude=chart.ascendant, class_tag=PointClass.SENSITIVE_POINT)
        )
    if inclusion.mc:
        points.append(
            Point(name=MIDHEAVEN, longitude=chart.midheaven, class_tag=PointClass.SENSITIVE_POINT)
        )
    if inclusion.node:
        node = _node_point(chart)
        if node is None:
            logger.warning("Node requested but chart has no node position")
        else:
            points.append(node)
    for flag, name in ((inclusion.chiron, CHIRON), (inclusion.lilith, LILITH)):
        if not flag:
            continue
        point = _body_point(chart, name)
        if point is not None:
            points.append(point)

    seen: set[str] = set()
    for point in points:
        if point.name in seen:
            raise DuplicatePointName(point.name)
        seen.add(point.name)
    return points
