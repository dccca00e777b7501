"""Angular math: longitude normalization, separation and wheel projection."""

from __future__ import annotations

import math

# Wheel angle of the Ascendant: 9 o'clock in screen coordinates
ASCENDANT_ANCHOR = 180.0


def normalize_degrees(value: float) -> float:
    """Reduce any angle into [0, 360)."""
    result = value % 360.0
    # a tiny negative value rounds up to exactly 360
    if result >= 360.0:
        result -= 360.0
    return result


def shortest_separation(lon1: float, lon2: float) -> float:
    """Calculate the shortest angular distance between two longitudes."""
    diff = abs(lon1 - lon2) % 360.0
    if diff > 180.0:
        diff = 360.0 - diff
    return diff


def project_to_wheel_angle(longitude: float, ascendant: float) -> float:
    """Wheel angle in degrees for an ecliptic longitude.

    The Ascendant lands on ``ASCENDANT_ANCHOR`` and longitudes increase
    counter-clockwise on screen, so the wheel angle decreases eastward.
    """
    relative = normalize_degrees(ascendant - longitude)
    return normalize_degrees(relative + ASCENDANT_ANCHOR)


def polar(center_x: float, center_y: float, radius: float, angle_deg: float) -> tuple[float, float]:
    """Screen coordinates (y down) for a wheel angle at the given radius."""
    rad = math.radians(angle_deg)
    return center_x + radius * math.cos(rad), center_y + radius * math.sin(rad)
