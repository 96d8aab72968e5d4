"""
Korean lunar calendar conversion.

Thin wrapper around korean-lunar-calendar (the KASI-derived tables the
Korean almanac uses). The engine treats it as a synchronous black box:
it returns a date or we raise InvalidDateError.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date

from korean_lunar_calendar import KoreanLunarCalendar

from manse.errors import InvalidDateError

logger = logging.getLogger(__name__)

# "庚午年 甲申月 丁巳日" plus an optional " (閏月)" suffix
_GAPJA_TOKEN = re.compile(r"([^\s()]{2})([年月日])")
_GAPJA_UNITS = {"年": "year", "月": "month", "日": "day"}


@dataclass(frozen=True)
class LunarDate:
    year: int
    month: int
    day: int
    is_leap_month: bool = False

    def __str__(self):
        leap = "윤" if self.is_leap_month else ""
        return f"{self.year}년 {leap}{self.month}월 {self.day}일"

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "is_leap_month": self.is_leap_month,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LunarDate":
        return cls(data["year"], data["month"], data["day"], data["is_leap_month"])


def solar_to_lunar(solar: date) -> LunarDate:
    """Convert a Gregorian date to the Korean lunar calendar."""
    calendar = KoreanLunarCalendar()
    if not calendar.setSolarDate(solar.year, solar.month, solar.day):
        raise InvalidDateError(f"Solar date {solar.isoformat()} is outside the lunar table")
    return LunarDate(
        calendar.lunarYear,
        calendar.lunarMonth,
        calendar.lunarDay,
        bool(calendar.isIntercalation),
    )


def lunar_to_solar(lunar: LunarDate) -> date:
    """
    Convert a Korean lunar date to the Gregorian calendar.

    A leap month (윤달) is only chosen when `is_leap_month` is True;
    asking for a leap instance the year does not have is an error,
    not a silent fallback to the regular month.

    Raises:
        InvalidDateError: the lunar date does not exist
    """
    calendar = KoreanLunarCalendar()
    valid = calendar.setLunarDate(lunar.year, lunar.month, lunar.day, lunar.is_leap_month)
    if not valid:
        raise InvalidDateError(f"Lunar date {lunar} does not exist")
    if lunar.is_leap_month and not calendar.isIntercalation:
        raise InvalidDateError(f"Lunar year {lunar.year} has no leap month {lunar.month}")
    solar = date(calendar.solarYear, calendar.solarMonth, calendar.solarDay)
    logger.debug("Lunar %s -> solar %s", lunar, solar.isoformat())
    return solar


def calendar_ganji(solar: date) -> dict:
    """
    Gapja strings the lunar library reports for a solar date.

    Its month and year follow the lunar calendar rather than solar terms,
    so only the day value is comparable with our pillars.

    Returns:
        dict with 'year', 'month', 'day' hanja pairs (e.g. {'day': '丁巳', ...})
    """
    calendar = KoreanLunarCalendar()
    if not calendar.setSolarDate(solar.year, solar.month, solar.day):
        raise InvalidDateError(f"Solar date {solar.isoformat()} is outside the lunar table")
    text = calendar.getChineseGapJaString()
    return {_GAPJA_UNITS[unit]: pair for pair, unit in _GAPJA_TOKEN.findall(text)}
