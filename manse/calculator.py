"""
만세력 result builder.

calculate_manse() is the single public entry point:
    BirthInput → normalize → resolve pillars → parse ganji
               → count elements → validate → ManseResult

The result is immutable and made of JSON-friendly values; to_dict() and
from_dict() round-trip it for callers that cache or store it.
It computes and flags; interpretation is left to callers.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from manse.astro_calendar import LI_CHUN
from manse.elements import (
    ElementDistribution, calc_elements, expected_element_total,
    validate_element_distribution,
)
from manse.errors import CalculationIntegrityError, GanjiMismatchError
from manse.ganji import Element, ParsedGanji, parse_ganji_string
from manse.lunar import LunarDate, calendar_ganji
from manse.normalize import BirthInput, NormalizedInput, normalize_input
from manse.pillars import ResolvedPillars, TrustLevel, resolve_pillars

logger = logging.getLogger(__name__)

PILLAR_LABELS = {
    "year": "년주",
    "month": "월주",
    "day": "일주",
    "hour": "시주",
}

DATA_SOURCE = {
    "solar_terms": "swisseph",
    "lunar_conversion": "korean_lunar_calendar",
}

WARNING_NEAR_BOUNDARY = "월주가 절기({term}) 경계와 가까워 실제 월주가 다를 수 있습니다."
WARNING_NEAR_LI_CHUN = "입춘 경계와 가까워 년주도 달라질 수 있습니다."
WARNING_NO_TIME = "출생 시간 미입력으로 시주를 계산할 수 없습니다."


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass(frozen=True)
class PillarOutput:
    position: str  # "year", "month", "day", "hour"
    ganji: Optional[ParsedGanji]
    is_available: bool
    trust_level: Optional[TrustLevel] = None  # month pillar only

    @property
    def label(self) -> str:
        return PILLAR_LABELS[self.position]

    def __str__(self):
        return f"{self.label}: {self.ganji if self.is_available else '?'}"

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "label": self.label,
            "is_available": self.is_available,
            "trust_level": self.trust_level.value if self.trust_level else None,
            "ganji": self.ganji.to_dict() if self.ganji else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PillarOutput":
        return cls(
            position=data["position"],
            ganji=ParsedGanji.from_dict(data["ganji"]) if data["ganji"] else None,
            is_available=data["is_available"],
            trust_level=TrustLevel(data["trust_level"]) if data["trust_level"] else None,
        )


@dataclass(frozen=True)
class FourPillars:
    year: PillarOutput
    month: PillarOutput
    day: PillarOutput
    hour: PillarOutput

    def __iter__(self):
        return iter((self.year, self.month, self.day, self.hour))

    def to_dict(self) -> dict:
        return {p.position: p.to_dict() for p in self}

    @classmethod
    def from_dict(cls, data: dict) -> "FourPillars":
        return cls(**{pos: PillarOutput.from_dict(data[pos]) for pos in PILLAR_LABELS})


@dataclass(frozen=True)
class SolarTermInfo:
    name: str
    hanja: str
    moment: str  # ISO timestamp in the birth time zone
    hours_from_birth: float  # signed, negative = birth before the crossing


@dataclass(frozen=True)
class CalculationMeta:
    month_trust: TrustLevel
    nearest_solar_term: SolarTermInfo
    lunar_converted: bool
    has_time_pillar: bool
    timezone: str
    solar_time_applied: bool = False
    lmt_correction_minutes: Optional[float] = None
    month_basis: str = "jeolgi"

    def to_dict(self) -> dict:
        return {
            "month_trust": self.month_trust.value,
            "month_basis": self.month_basis,
            "nearest_solar_term": {
                "name": self.nearest_solar_term.name,
                "hanja": self.nearest_solar_term.hanja,
                "moment": self.nearest_solar_term.moment,
                "hours_from_birth": self.nearest_solar_term.hours_from_birth,
            },
            "lunar_converted": self.lunar_converted,
            "has_time_pillar": self.has_time_pillar,
            "timezone": self.timezone,
            "solar_time_applied": self.solar_time_applied,
            "lmt_correction_minutes": self.lmt_correction_minutes,
            "data_source": dict(DATA_SOURCE),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CalculationMeta":
        return cls(
            month_trust=TrustLevel(data["month_trust"]),
            nearest_solar_term=SolarTermInfo(**data["nearest_solar_term"]),
            lunar_converted=data["lunar_converted"],
            has_time_pillar=data["has_time_pillar"],
            timezone=data["timezone"],
            solar_time_applied=data["solar_time_applied"],
            lmt_correction_minutes=data["lmt_correction_minutes"],
            month_basis=data["month_basis"],
        )


@dataclass(frozen=True)
class BirthSummary:
    """The birth as the user gave it (clock reading), in both calendars."""
    solar_year: int
    solar_month: int
    solar_day: int
    lunar: LunarDate
    hour: Optional[int] = None
    minute: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "solar": {"year": self.solar_year, "month": self.solar_month, "day": self.solar_day},
            "lunar": self.lunar.to_dict(),
            "time": {"hour": self.hour, "minute": self.minute} if self.hour is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BirthSummary":
        time = data["time"] or {}
        return cls(
            solar_year=data["solar"]["year"],
            solar_month=data["solar"]["month"],
            solar_day=data["solar"]["day"],
            lunar=LunarDate.from_dict(data["lunar"]),
            hour=time.get("hour"),
            minute=time.get("minute"),
        )


@dataclass(frozen=True)
class DayMaster:
    """일간: the day stem, the reference point of the chart."""
    char: str
    reading: str
    element: Element

    def to_dict(self) -> dict:
        return {"char": self.char, "reading": self.reading, "element": self.element.value}

    @classmethod
    def from_dict(cls, data: dict) -> "DayMaster":
        return cls(data["char"], data["reading"], Element(data["element"]))


@dataclass(frozen=True)
class ManseResult:
    pillars: FourPillars
    elements: ElementDistribution
    meta: CalculationMeta
    birth_summary: BirthSummary
    day_master: DayMaster
    warnings: tuple = ()

    def to_dict(self) -> dict:
        return {
            "pillars": self.pillars.to_dict(),
            "elements": self.elements.to_dict(),
            "meta": self.meta.to_dict(),
            "birth_summary": self.birth_summary.to_dict(),
            "day_master": self.day_master.to_dict(),
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ManseResult":
        return cls(
            pillars=FourPillars.from_dict(data["pillars"]),
            elements=ElementDistribution.from_dict(data["elements"]),
            meta=CalculationMeta.from_dict(data["meta"]),
            birth_summary=BirthSummary.from_dict(data["birth_summary"]),
            day_master=DayMaster.from_dict(data["day_master"]),
            warnings=tuple(data["warnings"]),
        )


# ============================================================
# BUILD STEPS
# ============================================================

def build_pillars(resolved: ResolvedPillars) -> FourPillars:
    """Annotate raw indices with characters, readings and elements."""
    hour_available = resolved.hour is not None
    return FourPillars(
        year=PillarOutput("year", parse_ganji_string(resolved.year), True),
        month=PillarOutput("month", parse_ganji_string(resolved.month), True,
                           trust_level=resolved.month_trust),
        day=PillarOutput("day", parse_ganji_string(resolved.day), True),
        hour=PillarOutput("hour",
                          parse_ganji_string(resolved.hour) if hour_available else None,
                          hour_available),
    )


def check_day_against_calendar(normalized: NormalizedInput, day: ParsedGanji) -> None:
    """
    Compare our day pillar with the lunar library's 일진.

    Both count the same 60-day cycle, so any difference means one of the
    tables is broken.

    Raises:
        GanjiMismatchError: the two day pillars differ
        UnknownGanjiCharacterError: the library returned an unreadable pair
    """
    upstream = parse_ganji_string(calendar_ganji(normalized.solar_date).get("day"))
    if upstream != day:
        raise GanjiMismatchError("day", str(day), str(upstream))


def collect_warnings(resolved: ResolvedPillars) -> tuple:
    warnings = []
    if resolved.month_trust is TrustLevel.NEAR_BOUNDARY:
        warnings.append(WARNING_NEAR_BOUNDARY.format(term=resolved.nearest_solar_term.name))
        if resolved.nearest_solar_term.name == LI_CHUN:
            warnings.append(WARNING_NEAR_LI_CHUN)
    if resolved.hour is None:
        warnings.append(WARNING_NO_TIME)
    return tuple(warnings)


def build_meta(normalized: NormalizedInput, resolved: ResolvedPillars) -> CalculationMeta:
    term = resolved.nearest_solar_term
    return CalculationMeta(
        month_trust=resolved.month_trust,
        nearest_solar_term=SolarTermInfo(
            name=term.name,
            hanja=term.hanja,
            moment=term.moment.astimezone(normalized.birth_instant.tzinfo).isoformat(timespec="minutes"),
            hours_from_birth=round(resolved.hours_from_solar_term, 2),
        ),
        lunar_converted=normalized.converted_from_lunar,
        has_time_pillar=normalized.has_time,
        timezone=normalized.timezone,
        solar_time_applied=normalized.solar_time_applied,
        lmt_correction_minutes=(round(normalized.lmt_correction_minutes, 2)
                                if normalized.solar_time_applied else None),
    )


def build_birth_summary(normalized: NormalizedInput) -> BirthSummary:
    clock = normalized.birth_instant
    return BirthSummary(
        solar_year=clock.year,
        solar_month=clock.month,
        solar_day=clock.day,
        lunar=normalized.lunar,
        hour=clock.hour if normalized.has_time else None,
        minute=clock.minute if normalized.has_time else None,
    )


# ============================================================
# ENTRY POINT
# ============================================================

def calculate_manse(birth: BirthInput) -> ManseResult:
    """
    Compute the Four Pillars chart for a birth input.

    Args:
        birth: raw birth data (solar or lunar, with or without time)

    Returns:
        Immutable ManseResult

    Raises:
        InvalidDateError / InvalidTimeError: bad user input, raised before
            any pillar is computed
        CalculationIntegrityError: tables and calendar library disagree
    """
    normalized = normalize_input(birth)
    resolved = resolve_pillars(normalized)

    try:
        pillars = build_pillars(resolved)
        check_day_against_calendar(normalized, pillars.day.ganji)
        elements = calc_elements(pillars)
        validate_element_distribution(elements, expected_element_total(normalized.has_time))
    except CalculationIntegrityError:
        logger.exception("Integrity failure computing pillars for %s", normalized)
        raise

    day = pillars.day.ganji
    result = ManseResult(
        pillars=pillars,
        elements=elements,
        meta=build_meta(normalized, resolved),
        birth_summary=build_birth_summary(normalized),
        day_master=DayMaster(day.stem_char, day.stem_reading, day.stem_element),
        warnings=collect_warnings(resolved),
    )
    logger.debug("Computed %s", " ".join(str(p) for p in pillars))
    return result
