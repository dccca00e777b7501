"""Aspect detection: best-fitting aspect per point pair."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from natalwheel.schemas.wheel import AspectDefinition, AspectEdge, LegendEntry, Point
from natalwheel.services.wheel_settings import AspectCatalog, OrbPolicy, WheelSettings

from ephemeris.angles import normalize_degrees, shortest_separation

logger = logging.getLogger(__name__)

# Conjunctions tighter than this are not drawn (a body and its own derived point)
MIN_CONJUNCTION_SEPARATION = 0.4


def pair_scale(point_a: Point, point_b: Point, orbs: OrbPolicy) -> float:
    """Orb scale for a pair: the stricter of the two body weights."""
    return min(orbs.weight(point_a.class_tag), orbs.weight(point_b.class_tag))


def best_aspect(
    separation: float,
    scale: float,
    definitions: Iterable[AspectDefinition],
) -> tuple[AspectDefinition, float] | None:
    """Pick the enabled definition closest to ``separation`` within its scaled orb.

    Ties keep the earlier definition. NaN separations never match.
    """
    best: AspectDefinition | None = None
    best_delta = float("inf")
    for definition in definitions:
        if not definition.enabled:
            continue
        delta = abs(separation - definition.angle)
        if delta <= definition.base_orb * scale and delta < best_delta:
            best = definition
            best_delta = delta
    if best is None:
        return None
    return best, best_delta


def _is_applying(
    lon1: float, lon2: float, speed1: float, speed2: float, aspect_angle: float
) -> bool:
    """Determine if an aspect is applying (getting tighter) or separating."""
    dist_now = shortest_separation(lon1, lon2)

    # Project positions forward slightly
    lon1_future = normalize_degrees(lon1 + speed1 * 0.1)
    lon2_future = normalize_degrees(lon2 + speed2 * 0.1)
    dist_future = shortest_separation(lon1_future, lon2_future)

    orb_now = abs(dist_now - aspect_angle)
    orb_future = abs(dist_future - aspect_angle)

    return orb_future < orb_now


def resolve_pair(point_a: Point, point_b: Point, settings: WheelSettings) -> AspectEdge:
    """Resolve one unordered pair into an edge, matched or not."""
    separation = shortest_separation(point_a.longitude, point_b.longitude)
    scale = pair_scale(point_a, point_b, settings.orbs)
    match = best_aspect(separation, scale, settings.aspects.definitions)

    if match is not None and match[0].angle == 0.0 and separation < MIN_CONJUNCTION_SEPARATION:
        match = None

    if match is None:
        return AspectEdge(point_a=point_a, point_b=point_b, separation=separation)

    definition, delta = match
    return AspectEdge(
        point_a=point_a,
        point_b=point_b,
        separation=separation,
        # snapshot so later catalog edits leave this edge untouched
        definition=definition.model_copy(),
        orb=delta,
        allowed_orb=definition.base_orb * scale,
        applying=_is_applying(
            point_a.longitude,
            point_b.longitude,
            point_a.speed_deg_day,
            point_b.speed_deg_day,
            definition.angle,
        ),
    )


def resolve_aspects(points: Sequence[Point], settings: WheelSettings) -> list[AspectEdge]:
    """Resolve every unordered pair of distinct points exactly once.

    Returns one edge per pair; unmatched pairs carry no definition.
    """
    edges = [
        resolve_pair(point_a, point_b, settings)
        for i, point_a in enumerate(points)
        for point_b in points[i + 1:]
    ]
    logger.debug(
        "Resolved %d pairs over %d points, %d matched",
        len(edges),
        len(points),
        sum(1 for e in edges if e.matched),
    )
    return edges


def matched_edges(edges: Iterable[AspectEdge]) -> list[AspectEdge]:
    return [e for e in edges if e.matched]


def aspect_legend(catalog: AspectCatalog) -> list[LegendEntry]:
    """Enabled aspects in catalog order, for drawing a legend."""
    return [
        LegendEntry(label=d.label, angle=d.angle, color=d.color, width=d.width)
        for d in catalog.enabled_definitions()
    ]
