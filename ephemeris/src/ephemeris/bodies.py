"""Body definitions, class table, sign data and longitude formatting."""

from __future__ import annotations

import math

from natalwheel.schemas.wheel import PointClass

from ephemeris.angles import normalize_degrees

# Celestial body IDs for pyswisseph
# These map to swisseph constants
BODY_IDS: dict[str, int] = {
    "Sun": 0,  # SE_SUN
    "Moon": 1,  # SE_MOON
    "Mercury": 2,  # SE_MERCURY
    "Venus": 3,  # SE_VENUS
    "Mars": 4,  # SE_MARS
    "Jupiter": 5,  # SE_JUPITER
    "Saturn": 6,  # SE_SATURN
    "Uranus": 7,  # SE_URANUS
    "Neptune": 8,  # SE_NEPTUNE
    "Pluto": 9,  # SE_PLUTO
    "True Node": 11,  # SE_TRUE_NODE
    "Chiron": 15,  # SE_CHIRON
    "Lilith": 12,  # SE_MEAN_APOG (Black Moon Lilith, mean apogee)
}

# Bodies computed for a natal chart, in display order
NATAL_BODIES = list(BODY_IDS.keys())

NODE_NAMES = ("True Node", "Mean Node")
CHIRON = "Chiron"
LILITH = "Lilith"
ASCENDANT = "ASC"
MIDHEAVEN = "MC"

BODY_CLASSES: dict[str, PointClass] = {
    "Sun": PointClass.LUMINARY,
    "Moon": PointClass.LUMINARY,
    "Mercury": PointClass.PERSONAL,
    "Venus": PointClass.PERSONAL,
    "Mars": PointClass.PERSONAL,
    "Jupiter": PointClass.SOCIAL,
    "Saturn": PointClass.SOCIAL,
    "Uranus": PointClass.OUTER,
    "Neptune": PointClass.OUTER,
    "Pluto": PointClass.OUTER,
}

BODY_COLORS: dict[str, str] = {
    "Sun": "#FFD400",
    "Moon": "#D2D2D2",
    "Mercury": "#A0A0A0",
    "Venus": "#FF8CAA",
    "Mars": "#E63C3C",
    "Jupiter": "#EBAA3C",
    "Saturn": "#A07846",
    "Uranus": "#50C8C8",
    "Neptune": "#508CDC",
    "Pluto": "#AA50BE",
    "True Node": "#787878",
    "Mean Node": "#787878",
    "Chiron": "#78AA50",
    "Lilith": "#D250B4",
}
DEFAULT_BODY_COLOR = "#DCDCDC"

# Zodiac signs in order
SIGNS = [
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
]

ROMAN_NUMERALS = ["I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X", "XI", "XII"]

SECONDS_PER_SIGN = 30 * 3600.0
SECONDS_PER_CIRCLE = 360 * 3600.0


def classify_body(name: str) -> PointClass:
    """Class of a body by name; anything not a planet is a sensitive point."""
    return BODY_CLASSES.get(name, PointClass.SENSITIVE_POINT)


def body_color(name: str) -> str:
    return BODY_COLORS.get(name, DEFAULT_BODY_COLOR)


def longitude_to_sign(longitude: float) -> tuple[str, float]:
    """Convert ecliptic longitude to sign and degree within sign."""
    longitude = normalize_degrees(longitude)
    sign_index = int(longitude / 30.0) % 12
    degree = longitude - (sign_index * 30.0)
    return SIGNS[sign_index], degree


def to_dms(degrees: float, precision: int = 2) -> tuple[int, int, float]:
    """Split decimal degrees into whole degrees, minutes and seconds.

    Seconds are rounded to ``precision`` places before splitting, so a value
    that rounds up to 60 seconds carries into the minutes and degrees.
    """
    total = round(degrees * 3600.0, precision)
    whole = math.floor(total / 3600.0)
    remainder = total - whole * 3600.0
    minutes = math.floor(remainder / 60.0)
    seconds = round(remainder - minutes * 60.0, precision)
    return int(whole), int(minutes), seconds


def format_longitude(longitude: float, ascii_degrees: bool = False) -> str:
    """Format a longitude as e.g. ``Aquarius 23° 04' 12.50"``."""
    # round first so 29°59'59.999" reads as the next sign, not 60 seconds
    total = round(normalize_degrees(longitude) * 3600.0, 2) % SECONDS_PER_CIRCLE
    sign_index = int(total // SECONDS_PER_SIGN)
    deg, minutes, seconds = to_dms((total - sign_index * SECONDS_PER_SIGN) / 3600.0)
    sign = SIGNS[sign_index]
    degree_mark = " deg " if ascii_degrees else "° "
    return f"{sign} {deg}{degree_mark}{minutes:02d}' {seconds:.2f}\""
