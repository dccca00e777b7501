"""Wall-clock birth time to UTC, and timezone inference from coordinates."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel
from timezonefinder import TimezoneFinder

logger = logging.getLogger(__name__)

WALL_CLOCK_FORMATS = ("%Y-%m-%d %H:%M:%S.%f", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M")

_finder: TimezoneFinder | None = None


class ConversionStatus(str, Enum):
    """Outcome of a local-to-UTC conversion."""

    OK = "ok"
    UNKNOWN_TIMEZONE = "unknown_timezone"
    AMBIGUOUS_LOCAL_TIME = "ambiguous_local_time"
    NONEXISTENT_LOCAL_TIME = "nonexistent_local_time"


class TimezoneConversion(BaseModel):
    """Result of converting a wall-clock time in ``tzid`` to UTC.

    ``utc`` is set for OK and for ambiguous times (earlier of the two
    instants); it is None when the zone is unknown or the time falls in a
    daylight-saving gap.
    """

    status: ConversionStatus
    tzid: str
    local: datetime
    utc: datetime | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status == ConversionStatus.OK


def parse_wall_clock(text: str) -> datetime:
    """Parse ``YYYY-MM-DD HH:MM[:SS]`` into a naive datetime."""
    value = text.strip().replace("T", " ", 1)
    for fmt in WALL_CLOCK_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError("Bad datetime. Use YYYY-MM-DD HH:MM[:SS].")


def local_to_utc(tzid: str, wall_clock: datetime) -> TimezoneConversion:
    """Convert a wall-clock time in an IANA zone to UTC."""
    naive = wall_clock.replace(tzinfo=None)
    try:
        tz = ZoneInfo(tzid)
    except (ZoneInfoNotFoundError, ValueError):
        return TimezoneConversion(
            status=ConversionStatus.UNKNOWN_TIMEZONE,
            tzid=tzid,
            local=naive,
            detail=f"Unknown time zone '{tzid}'",
        )

    earlier = naive.replace(tzinfo=tz, fold=0).astimezone(UTC)
    later = naive.replace(tzinfo=tz, fold=1).astimezone(UTC)

    if earlier.astimezone(tz).replace(tzinfo=None) != naive:
        return TimezoneConversion(
            status=ConversionStatus.NONEXISTENT_LOCAL_TIME,
            tzid=tzid,
            local=naive,
            detail=f"{naive.isoformat(sep=' ')} does not exist in {tzid} (clocks skipped forward)",
        )
    if earlier != later:
        return TimezoneConversion(
            status=ConversionStatus.AMBIGUOUS_LOCAL_TIME,
            tzid=tzid,
            local=naive,
            utc=earlier,
            detail=f"{naive.isoformat(sep=' ')} occurs twice in {tzid} (clocks fell back)",
        )
    return TimezoneConversion(status=ConversionStatus.OK, tzid=tzid, local=naive, utc=earlier)


def _get_finder() -> TimezoneFinder:
    global _finder
    if _finder is None:
        _finder = TimezoneFinder(in_memory=True)
    return _finder


def infer_timezone(*, latitude: float, longitude: float) -> str | None:
    """Infer IANA timezone for the given coordinates."""
    finder = _get_finder()
    timezone_name = finder.timezone_at(lng=longitude, lat=latitude)
    if not timezone_name:
        timezone_name = finder.certain_timezone_at(lng=longitude, lat=latitude)
    if not timezone_name:
        return None

    normalized = str(timezone_name).strip()
    if not normalized:
        return None

    try:
        ZoneInfo(normalized)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Inferred timezone '%s' is not in the tz database", normalized)
        return None
    return normalized


def resolve_timezone(
    *,
    latitude: float,
    longitude: float,
    fallback_timezone: str,
) -> tuple[str, bool]:
    """Resolve timezone from coordinates and indicate if fallback was overridden."""
    fallback = fallback_timezone.strip()
    inferred = infer_timezone(latitude=latitude, longitude=longitude)
    if inferred:
        return inferred, inferred != fallback
    return fallback, False
