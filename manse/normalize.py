"""
Birth input normalization.

Turns untrusted form data (strings or ints, solar or lunar) into a canonical
solar-calendar NormalizedInput placed in a concrete time zone.
Timezone is taken from the input, detected from birth coordinates, or falls
back to Korean clock time; historical DST (Korea 1948-1960, 1987-1988) is
handled by zoneinfo.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from functools import lru_cache
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timezonefinder import TimezoneFinder

from manse import config
from manse.astro_calendar import apply_lmt, lmt_correction
from manse.errors import InvalidDateError, InvalidTimeError
from manse.lunar import LunarDate, lunar_to_solar, solar_to_lunar

logger = logging.getLogger(__name__)

# Stand-in moment for the month/year boundary check when the time is unknown
UNKNOWN_TIME_REFERENCE_HOUR = 12

# Optional sign and ASCII digits, nothing else
_INTEGER = re.compile(r"-?[0-9]+")


class CalendarType(Enum):
    SOLAR = "solar"
    LUNAR = "lunar"


_CALENDAR_ALIASES = {
    "solar": CalendarType.SOLAR,
    "양력": CalendarType.SOLAR,
    "lunar": CalendarType.LUNAR,
    "음력": CalendarType.LUNAR,
}


@dataclass
class BirthInput:
    """Raw birth data as the form submits it. Nothing here is trusted."""
    year: Union[int, str]
    month: Union[int, str]
    day: Union[int, str]
    hour: Optional[Union[int, str]] = None
    minute: Optional[Union[int, str]] = None
    calendar_type: Union[CalendarType, str] = CalendarType.SOLAR
    has_time: bool = False
    is_leap_month: Optional[bool] = None
    timezone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    use_solar_time: bool = False


@dataclass(frozen=True)
class NormalizedInput:
    """
    Canonical solar-calendar input.

    year/month/day/hour/minute are the reading that feeds the day and hour
    pillars (LMT-corrected when solar time is applied). hour and minute are
    None when the birth time is unknown. birth_instant is the physical moment
    used against solar terms; with an unknown time it is local noon.
    """
    year: int
    month: int
    day: int
    hour: Optional[int]
    minute: Optional[int]
    has_time: bool
    lunar: LunarDate
    converted_from_lunar: bool
    timezone: str
    birth_instant: datetime
    longitude: Optional[float] = None
    lmt_correction_minutes: Optional[float] = None

    @property
    def solar_date(self) -> date:
        return date(self.year, self.month, self.day)

    @property
    def solar_time_applied(self) -> bool:
        return self.lmt_correction_minutes is not None


# ============================================================
# COERCION HELPERS
# ============================================================

def _coerce_int(value, field: str, error_cls) -> int:
    if isinstance(value, bool):
        raise error_cls(f"{field} must be a number, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER.fullmatch(value.strip()):
        return int(value.strip())
    raise error_cls(f"{field} must be a number, got {value!r}")


def _coerce_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    return bool(value)


def _coerce_calendar_type(value) -> CalendarType:
    if isinstance(value, CalendarType):
        return value
    calendar_type = _CALENDAR_ALIASES.get(str(value).strip().lower())
    if calendar_type is None:
        raise InvalidDateError(f"Unknown calendar type {value!r}")
    return calendar_type


# ============================================================
# TIMEZONE
# ============================================================

@lru_cache(maxsize=1)
def _timezone_finder() -> TimezoneFinder:
    return TimezoneFinder()


def resolve_timezone(tz_name: Optional[str] = None,
                     latitude: Optional[float] = None,
                     longitude: Optional[float] = None) -> ZoneInfo:
    """
    Pick the birth time zone.

    Order: explicit IANA name, lookup from coordinates, configured default.

    Raises:
        InvalidTimeError: unknown zone name or coordinates outside any zone
    """
    if not tz_name and latitude is not None and longitude is not None:
        if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
            raise InvalidTimeError(f"Coordinates out of range: ({latitude}, {longitude})")
        tz_name = _timezone_finder().timezone_at(lat=latitude, lng=longitude)
        if tz_name is None:
            raise InvalidTimeError(f"Could not determine timezone for ({latitude}, {longitude})")
        logger.debug("Timezone %s detected from (%s, %s)", tz_name, latitude, longitude)
    tz_name = tz_name or config.DEFAULT_TIMEZONE
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimeError(f"Unknown timezone {tz_name!r}") from e


def local_mean_time(local_dt: datetime, longitude: float) -> tuple[datetime, float]:
    """
    Convert an aware clock time to naive Local Mean Time.

    DST is stripped first, then the LMT correction is taken against the
    zone's standard meridian (standard offset × 15°).

    Returns:
        (lmt_datetime, correction_minutes)
    """
    dst = local_dt.dst() or timedelta(0)
    standard_offset = local_dt.utcoffset() - dst
    standard_meridian = standard_offset.total_seconds() / 3600 * 15
    standard_time = local_dt.replace(tzinfo=None) - dst
    correction = lmt_correction(longitude, standard_meridian)
    return apply_lmt(standard_time, longitude, standard_meridian), correction


# ============================================================
# NORMALIZATION
# ============================================================

def _resolve_solar_date(calendar_type: CalendarType, year: int, month: int, day: int,
                        is_leap_month: bool) -> tuple[date, LunarDate]:
    if not 1 <= month <= 12:
        raise InvalidDateError(f"Month must be 1-12, got {month}")

    if calendar_type is CalendarType.LUNAR:
        lunar = LunarDate(year, month, day, is_leap_month)
        return lunar_to_solar(lunar), lunar

    try:
        solar = date(year, month, day)
    except ValueError as e:
        raise InvalidDateError(f"{year}-{month:02d}-{day:02d} is not a valid solar date") from e
    return solar, solar_to_lunar(solar)


def normalize_input(raw: BirthInput) -> NormalizedInput:
    """
    Validate and canonicalize a birth input.

    Leap months: a lunar month is read as the regular month unless
    `is_leap_month` is explicitly True.

    Raises:
        InvalidDateError: date does not exist in the stated calendar,
            year outside the supported range, unknown calendar type
        InvalidTimeError: hour/minute out of range, missing hour,
            unknown timezone
    """
    calendar_type = _coerce_calendar_type(raw.calendar_type)
    year = _coerce_int(raw.year, "year", InvalidDateError)
    month = _coerce_int(raw.month, "month", InvalidDateError)
    day = _coerce_int(raw.day, "day", InvalidDateError)

    if not config.MIN_YEAR <= year <= config.MAX_YEAR:
        raise InvalidDateError(
            f"Year {year} outside supported range {config.MIN_YEAR}-{config.MAX_YEAR}"
        )

    is_leap = calendar_type is CalendarType.LUNAR and _coerce_bool(raw.is_leap_month)
    solar, lunar = _resolve_solar_date(calendar_type, year, month, day, is_leap)

    has_time = _coerce_bool(raw.has_time)
    hour = minute = None
    if has_time:
        if raw.hour is None or raw.hour == "":
            raise InvalidTimeError("has_time is set but no hour was given")
        hour = _coerce_int(raw.hour, "hour", InvalidTimeError)
        minute = 0 if raw.minute in (None, "") else _coerce_int(raw.minute, "minute", InvalidTimeError)
        if not 0 <= hour <= 23:
            raise InvalidTimeError(f"Hour must be 0-23, got {hour}")
        if not 0 <= minute <= 59:
            raise InvalidTimeError(f"Minute must be 0-59, got {minute}")

    tz = resolve_timezone(raw.timezone, raw.latitude, raw.longitude)
    clock = datetime(solar.year, solar.month, solar.day,
                     hour if has_time else UNKNOWN_TIME_REFERENCE_HOUR,
                     minute if has_time else 0, tzinfo=tz)

    reading = clock.replace(tzinfo=None)
    correction = None
    if raw.use_solar_time:
        if raw.longitude is None:
            raise InvalidTimeError("Solar time correction needs a birth longitude")
        if has_time:
            reading, correction = local_mean_time(clock, raw.longitude)
            logger.debug("LMT correction %.1f min: %s -> %s", correction, clock, reading)

    normalized = NormalizedInput(
        year=reading.year,
        month=reading.month,
        day=reading.day,
        hour=reading.hour if has_time else None,
        minute=reading.minute if has_time else None,
        has_time=has_time,
        lunar=lunar,
        converted_from_lunar=calendar_type is CalendarType.LUNAR,
        timezone=tz.key,
        birth_instant=clock,
        longitude=raw.longitude,
        lmt_correction_minutes=correction,
    )
    logger.debug("Normalized %r -> %r", raw, normalized)
    return normalized
