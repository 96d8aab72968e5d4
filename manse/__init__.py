"""
Four Pillars (사주 / 만세력) calculation engine.

    from manse import BirthInput, calculate_manse
    result = calculate_manse(BirthInput(1990, 8, 20, hour=9, minute=0, has_time=True))
"""

from manse.calculator import ManseResult, PillarOutput, calculate_manse
from manse.elements import ElementDistribution, calc_elements, validate_element_distribution
from manse.errors import (
    CalculationIntegrityError, ElementTotalMismatchError, GanjiMismatchError,
    InputError, InvalidDateError, InvalidTimeError, SajuCalculationError,
    UnknownGanjiCharacterError,
)
from manse.ganji import Element, ParsedGanji, RawGanji, parse_ganji_string
from manse.lunar import LunarDate, lunar_to_solar, solar_to_lunar
from manse.normalize import BirthInput, CalendarType, NormalizedInput, normalize_input
from manse.pillars import ResolvedPillars, TrustLevel, resolve_pillars

__all__ = [
    "BirthInput", "CalendarType", "NormalizedInput", "normalize_input",
    "RawGanji", "ResolvedPillars", "TrustLevel", "resolve_pillars",
    "Element", "ParsedGanji", "parse_ganji_string",
    "ElementDistribution", "calc_elements", "validate_element_distribution",
    "ManseResult", "PillarOutput", "calculate_manse",
    "LunarDate", "lunar_to_solar", "solar_to_lunar",
    "SajuCalculationError", "InputError", "InvalidDateError", "InvalidTimeError",
    "CalculationIntegrityError", "UnknownGanjiCharacterError",
    "ElementTotalMismatchError", "GanjiMismatchError",
]
