"""Chart calculator entry point: python -m ephemeris."""

from __future__ import annotations

import argparse
import logging
import sys

from natalwheel.config import get_settings
from natalwheel.services.wheel_settings import WheelSettings

from ephemeris.natal import HOUSE_SYSTEMS, calculate_natal_chart, chart_summary

logger = logging.getLogger("ephemeris")

MINOR_ASPECTS = ("Semisextile", "Semisquare", "Sesquiquadrate", "Quintile", "Biquintile")


def _parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Compute a natal chart with its aspects.")
    parser.add_argument("datetime", help="Birth time as 'YYYY-MM-DD HH:MM[:SS]'.")
    parser.add_argument("--lat", type=float, required=True, help="Latitude (south negative).")
    parser.add_argument("--lon", type=float, required=True, help="Longitude (east positive).")
    parser.add_argument(
        "--tz",
        default=settings.timezone,
        help=f"IANA time zone of the birth time (default: {settings.timezone}).",
    )
    parser.add_argument(
        "--house-system",
        choices=sorted(HOUSE_SYSTEMS),
        default=settings.house_system,
    )
    parser.add_argument(
        "--ascii",
        action="store_true",
        default=settings.ascii_degrees,
        help="Print 'deg' instead of the degree sign.",
    )
    parser.add_argument("--minor", action="store_true", help="Enable all minor aspects.")
    for point in ("asc", "mc", "node", "chiron", "lilith"):
        parser.add_argument(f"--no-{point}", action="store_true", help=f"Leave out {point.upper()}.")
    return parser


def _wheel_settings(args: argparse.Namespace) -> WheelSettings:
    wheel = WheelSettings()
    if args.minor:
        for label in MINOR_ASPECTS:
            wheel.aspects.set_enabled(label, True)
    for point in ("asc", "mc", "node", "chiron", "lilith"):
        if getattr(args, f"no_{point}"):
            wheel.set_point(point, False)
    return wheel


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stdout,
    )

    try:
        wheel = calculate_natal_chart(
            args.datetime,
            args.lat,
            args.lon,
            timezone_name=args.tz,
            house_system=args.house_system,
            settings=_wheel_settings(args),
        )
    except ValueError as exc:
        logger.error("Chart computation failed: %s", exc)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    summary = chart_summary(wheel, ascii_degrees=args.ascii)
    print("Planets:")
    for body in summary["bodies"]:
        retro = " [R]" if body["retrograde"] else ""
        print(f"{body['name']:>10}: {body['longitude']}{retro}  (house {body['house']})")

    print("\nHouses:")
    for house in summary["houses"]:
        print(f"  House {house['house']:>2}: {house['cusp']}")

    print(f"\nAscendant: {summary['angles']['ascendant']}")
    print(f"Midheaven: {summary['angles']['midheaven']}")

    print("\nAspects:")
    for aspect in summary["aspects"]:
        motion = "applying" if aspect["applying"] else "separating"
        print(
            f"  {aspect['point_a']} {aspect['type']} {aspect['point_b']}"
            f"  orb {aspect['orb_degrees']:.2f} ({motion})"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
