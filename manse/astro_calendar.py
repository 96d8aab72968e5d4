"""
Calendar utilities for the Four Pillars engine.
Handles Julian Day conversion, solar term (절기) lookups
and Local Mean Time correction on top of Swiss Ephemeris.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import swisseph as swe

from manse import config

logger = logging.getLogger(__name__)

# Point Swiss Ephemeris to data files (Moshier fallback when the directory is empty)
swe.set_ephe_path(config.EPHE_PATH)


# ============================================================
# JULIAN DAY HELPERS
# ============================================================

def julian_day(moment: datetime) -> float:
    """
    Julian Day (UT) of an aware datetime.

    Naive datetimes are rejected: a birth instant without a zone
    cannot be placed against solar-term crossings.
    """
    if moment.tzinfo is None:
        raise ValueError("julian_day() needs a timezone-aware datetime")
    utc = moment.astimezone(timezone.utc)
    hour = utc.hour + utc.minute / 60 + utc.second / 3600
    return swe.julday(utc.year, utc.month, utc.day, hour)


def julian_day_number(year: int, month: int, day: int) -> int:
    """Integer JDN of a civil date (the JD at local noon)."""
    return int(swe.julday(year, month, day, 12.0))


def jd_to_datetime(jd: float) -> datetime:
    """Convert a Julian Day (UT) to an aware UTC datetime."""
    y, m, d, h = swe.revjul(jd)
    return datetime(y, m, d, tzinfo=timezone.utc) + timedelta(hours=h)


# ============================================================
# LOCAL MEAN TIME
# ============================================================

def lmt_correction(longitude: float, standard_meridian: float = 135.0) -> float:
    """
    Minutes between zone clock time and local mean solar time.

    Each degree of longitude away from the zone meridian is four minutes.
    KST is kept on 135°E while Seoul lies near 127°E, so Seoul's sun
    runs about half an hour behind the clock.

    Args:
        longitude: degrees, east positive
        standard_meridian: meridian the zone's standard offset is based on

    Returns:
        Signed minutes to add to the clock reading (negative west of the meridian)

    Example:
        lmt_correction(126.978) == -32.088, so 11:20 KST reads 10:47 LMT
    """
    return (longitude - standard_meridian) * 4.0


def apply_lmt(standard_time: datetime, longitude: float,
              standard_meridian: float = 135.0) -> datetime:
    """Shift a DST-free wall-clock reading onto local mean time."""
    return standard_time + timedelta(minutes=lmt_correction(longitude, standard_meridian))


# ============================================================
# SOLAR TERM COMPUTATION
# ============================================================
#
# The 12 Jie (절) solar terms mark month pillar boundaries.
# Each Jie is defined by the Sun reaching a specific ecliptic longitude.
# Swiss Ephemeris swe.solcross_ut() finds the exact crossing moment.
#
# 입춘 (315°) → 寅 month (month 1), and the pillar year starts here
# 경칩 (345°) → 卯    청명 (15°)  → 辰    입하 (45°)  → 巳
# 망종 (75°)  → 午    소서 (105°) → 未    입추 (135°) → 申
# 백로 (165°) → 酉    한로 (195°) → 戌    입동 (225°) → 亥
# 대설 (255°) → 子    소한 (285°) → 丑

# (longitude, korean name, hanja name, branch_index)
JIE_DEFINITIONS = [
    (285, "소한", "小寒", 1),
    (315, "입춘", "立春", 2),
    (345, "경칩", "驚蟄", 3),
    (15, "청명", "淸明", 4),
    (45, "입하", "立夏", 5),
    (75, "망종", "芒種", 6),
    (105, "소서", "小暑", 7),
    (135, "입추", "立秋", 8),
    (165, "백로", "白露", 9),
    (195, "한로", "寒露", 10),
    (225, "입동", "立冬", 11),
    (255, "대설", "大雪", 0),
]

LI_CHUN = "입춘"


@dataclass(frozen=True)
class SolarTerm:
    name: str
    hanja: str
    longitude: float
    branch_index: int
    year: int  # Gregorian year of the crossing
    jd: float

    @property
    def moment(self) -> datetime:
        return jd_to_datetime(self.jd)


def find_jie_dates(year: int) -> list[SolarTerm]:
    """
    Compute all 12 Jie solar terms for a given Gregorian year.

    Uses Swiss Ephemeris to find the exact moment the Sun crosses
    each Jie longitude. Returns terms in chronological order.
    """
    results = []
    jd_year_start = swe.julday(year, 1, 1, 0)

    for lon, name, hanja, branch_idx in JIE_DEFINITIONS:
        jd_cross = swe.solcross_ut(float(lon), jd_year_start, 0)
        y, _, _, _ = swe.revjul(jd_cross)
        # Only include crossings that fall within this Gregorian year
        if y == year:
            results.append(SolarTerm(name, hanja, float(lon), branch_idx, year, jd_cross))

    results.sort(key=lambda t: t.jd)
    return results


def jie_terms_around(year: int) -> list[SolarTerm]:
    """Jie terms of the year before, the year itself and the year after."""
    terms = []
    for y in (year - 1, year, year + 1):
        terms.extend(find_jie_dates(y))
    return terms


def find_previous_jie(jd: float, year: int, name: str = None) -> SolarTerm:
    """
    Latest Jie crossing at or before a moment.

    Args:
        jd: Julian Day (UT) of the moment
        year: Gregorian year of the moment
        name: restrict the search to one term (e.g. LI_CHUN)

    Returns:
        The SolarTerm whose month the moment falls in
    """
    for term in reversed(jie_terms_around(year)):
        if term.jd <= jd and (name is None or term.name == name):
            return term
    raise ValueError(f"Could not find previous Jie from JD {jd}")


def find_nearest_jie(jd: float, year: int) -> SolarTerm:
    """
    Find the Jie crossing closest to a moment, in either direction.

    Args:
        jd: Julian Day (UT) of the moment
        year: Gregorian year of the moment

    Returns:
        The nearest SolarTerm
    """
    nearest = min(jie_terms_around(year), key=lambda t: abs(t.jd - jd))
    logger.debug("Nearest Jie to JD %.5f is %s at JD %.5f", jd, nearest.name, nearest.jd)
    return nearest
