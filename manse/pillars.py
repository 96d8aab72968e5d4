"""
Four Pillars resolver.

Given a NormalizedInput, computes the raw stem/branch indices of the
year, month, day and hour pillars.

- Year and month follow the Jie (절) solar terms, not January 1st or
  Gregorian months. The year switches at 입춘.
- Day follows the continuous 60-day cycle over the Julian Day Number.
- Hour follows fixed two-hour blocks and a day-stem keyed rotation table.

All arithmetic is modular over fixed cycles: once the input is
normalized there is no user-facing failure path here.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from manse import config
from manse.astro_calendar import (
    LI_CHUN, SolarTerm, find_nearest_jie, find_previous_jie, julian_day,
    julian_day_number,
)
from manse.ganji import RawGanji
from manse.normalize import NormalizedInput

logger = logging.getLogger(__name__)


class TrustLevel(Enum):
    """Confidence in the month pillar."""
    EXACT = "exact"
    NEAR_BOUNDARY = "near-boundary"
    UNVERIFIABLE = "unverifiable"


# ============================================================
# FIXED TABLES
# ============================================================

# (int(JDN) + 49) % 60 gives the sexagenary index (甲子 = 0).
# Checked against 2000-01-01 = 戊午 and 1990-08-20 = 丁巳.
_JDN_SEXAGENARY_OFFSET = 49

# Year 4 CE was 甲子, the start of the cycle
_YEAR_CYCLE_ANCHOR = 4

# Five Tigers Escape (五虎遁): stem of the 寅 month keyed by year stem
#   甲/己 → 丙寅   乙/庚 → 戊寅   丙/辛 → 庚寅   丁/壬 → 壬寅   戊/癸 → 甲寅
YEAR_STEM_TO_MONTH_CHEONGAN_START = (2, 4, 6, 8, 0, 2, 4, 6, 8, 0)

# Five Rats Escape (五鼠遁): stem of the 子 hour keyed by day stem (일간)
#   甲/己 → 甲子   乙/庚 → 丙子   丙/辛 → 戊子   丁/壬 → 庚子   戊/癸 → 壬子
ILGAN_TO_HOUR_CHEONGAN_START = (0, 2, 4, 6, 8, 0, 2, 4, 6, 8)

# Clock hour → hour branch (시진):
#   23:00-00:59 子   01:00-02:59 丑   03:00-04:59 寅   05:00-06:59 卯
#   07:00-08:59 辰   09:00-10:59 巳   11:00-12:59 午   13:00-14:59 未
#   15:00-16:59 申   17:00-18:59 酉   19:00-20:59 戌   21:00-22:59 亥
HOUR_TO_BRANCH_INDEX = (
    0, 1, 1, 2, 2, 3, 3, 4, 4, 5, 5, 6,
    6, 7, 7, 8, 8, 9, 9, 10, 10, 11, 11, 0,
)

# The hour that opens the next day's 子 block
_LATE_ZI_HOUR = 23


@dataclass(frozen=True)
class ResolvedPillars:
    year: RawGanji
    month: RawGanji
    day: RawGanji
    hour: Optional[RawGanji]
    month_trust: TrustLevel
    nearest_solar_term: SolarTerm
    hours_from_solar_term: float  # signed, negative = birth before the crossing


# ============================================================
# PILLAR COMPUTATION
# ============================================================

def year_ganji(pillar_year: int) -> RawGanji:
    """Year pillar of a pillar year (already shifted at 입춘)."""
    offset = pillar_year - _YEAR_CYCLE_ANCHOR
    return RawGanji(offset % 10, offset % 12)


def month_ganji(year_stem_index: int, month_branch_index: int) -> RawGanji:
    """
    Month pillar from the year stem and the solar-term month branch.

    Month 1 (寅) has branch index 2; the stem advances one step per month
    from the Five Tigers start.
    """
    start_stem = YEAR_STEM_TO_MONTH_CHEONGAN_START[year_stem_index]
    months_from_tiger = (month_branch_index - 2) % 12
    return RawGanji((start_stem + months_from_tiger) % 10, month_branch_index)


def day_ganji(year: int, month: int, day: int) -> RawGanji:
    """Day pillar from the continuous 60-day count over JDN."""
    sexagenary = (julian_day_number(year, month, day) + _JDN_SEXAGENARY_OFFSET) % 60
    return RawGanji(sexagenary % 10, sexagenary % 12)


def hour_ganji(day_stem_index: int, hour: int) -> RawGanji:
    """
    Hour pillar from the day stem and the clock hour.

    23:00-23:59 is the 子 block of the *next* day, so its stem comes from
    the next day's stem row. The day pillar itself does not move.
    """
    branch_index = HOUR_TO_BRANCH_INDEX[hour]
    key_stem = (day_stem_index + 1) % 10 if hour == _LATE_ZI_HOUR else day_stem_index
    start_stem = ILGAN_TO_HOUR_CHEONGAN_START[key_stem]
    return RawGanji((start_stem + branch_index) % 10, branch_index)


def month_trust_level(hours_from_term: float, has_time: bool) -> TrustLevel:
    """
    Near-boundary when the birth moment is within the configured window of a Jie.

    An unknown birth time could be anywhere in the civil day, so the
    window grows by half a day around the noon stand-in.
    """
    window = config.BOUNDARY_WINDOW_HOURS + (0 if has_time else 12)
    return TrustLevel.NEAR_BOUNDARY if abs(hours_from_term) <= window else TrustLevel.EXACT


def resolve_pillars(normalized: NormalizedInput) -> ResolvedPillars:
    """
    Compute the four raw pillars.

    Args:
        normalized: canonical solar input

    Returns:
        ResolvedPillars with indices only; hour is None without a birth time
    """
    jd = julian_day(normalized.birth_instant)
    instant_year = normalized.birth_instant.year

    month_term = find_previous_jie(jd, instant_year)
    li_chun = find_previous_jie(jd, instant_year, name=LI_CHUN)
    nearest = find_nearest_jie(jd, instant_year)
    hours_from_term = (jd - nearest.jd) * 24

    year = year_ganji(li_chun.year)
    month = month_ganji(year.stem_index, month_term.branch_index)
    day = day_ganji(normalized.year, normalized.month, normalized.day)
    hour = hour_ganji(day.stem_index, normalized.hour) if normalized.has_time else None

    trust = month_trust_level(hours_from_term, normalized.has_time)
    if trust is TrustLevel.NEAR_BOUNDARY:
        logger.warning(
            "Birth %s is %.1fh from %s; month pillar marked near-boundary",
            normalized.birth_instant.isoformat(), hours_from_term, nearest.name,
        )

    return ResolvedPillars(
        year=year,
        month=month,
        day=day,
        hour=hour,
        month_trust=trust,
        nearest_solar_term=nearest,
        hours_from_solar_term=hours_from_term,
    )
