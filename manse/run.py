"""
CLI wrapper for calculate_manse().

Usage:
    python -m manse.run --date YYYY-MM-DD [--time HH:MM] [--lunar [--leap]] \
        [--timezone ZONE] [--latitude LAT --longitude LON] [--solar-time]
"""

import argparse
import json
import logging
import sys

from manse import config
from manse.calculator import calculate_manse
from manse.errors import InputError
from manse.normalize import BirthInput, CalendarType


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute a Four Pillars (만세력) chart.")
    parser.add_argument("--date", required=True, help="birth date YYYY-MM-DD")
    parser.add_argument("--time", default=None, help="birth time HH:MM (omit if unknown)")
    parser.add_argument("--lunar", action="store_true", help="date is on the lunar calendar")
    parser.add_argument("--leap", action="store_true", help="lunar month is the leap month (윤달)")
    parser.add_argument("--timezone", default=None)
    parser.add_argument("--latitude", type=float, default=None)
    parser.add_argument("--longitude", type=float, default=None)
    parser.add_argument("--solar-time", dest="solar_time", action="store_true",
                        help="correct the birth time to local mean time")
    return parser


def birth_input_from_args(args: argparse.Namespace) -> BirthInput:
    try:
        year, month, day = args.date.split("-")
        hour = minute = None
        if args.time:
            hour, minute = args.time.split(":")
    except ValueError as e:
        raise InputError(f"Could not read date/time {args.date!r} {args.time!r}") from e

    return BirthInput(
        year=year,
        month=month,
        day=day,
        hour=hour,
        minute=minute,
        calendar_type=CalendarType.LUNAR if args.lunar else CalendarType.SOLAR,
        has_time=args.time is not None,
        is_leap_month=args.leap,
        timezone=args.timezone,
        latitude=args.latitude,
        longitude=args.longitude,
        use_solar_time=args.solar_time,
    )


def main(argv=None) -> int:
    logging.basicConfig(level=config.LOG_LEVEL,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)

    try:
        result = calculate_manse(birth_input_from_args(args))
    except InputError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
