"""
Heavenly stems, earthly branches and the ganji (干支) parser.

Holds the fixed 10-stem / 12-branch tables and maps any upstream
representation of a stem-branch pair (hanja "庚午", hangul "경오",
the public-data API form "경오(庚午)", or raw indices) onto one
canonical ParsedGanji.

Pure table lookups. An unknown character or an impossible pair is a data
integrity failure, never silently defaulted to some element.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union

from manse.errors import UnknownGanjiCharacterError


# ============================================================
# FUNDAMENTAL DATA STRUCTURES
# ============================================================

class Element(Enum):
    WOOD = "wood"
    FIRE = "fire"
    EARTH = "earth"
    METAL = "metal"
    WATER = "water"

    @property
    def korean(self) -> str:
        return _ELEMENT_KOREAN[self]

    @property
    def hanja(self) -> str:
        return _ELEMENT_HANJA[self]


_ELEMENT_KOREAN = {
    Element.WOOD: "목", Element.FIRE: "화", Element.EARTH: "토",
    Element.METAL: "금", Element.WATER: "수",
}
_ELEMENT_HANJA = {
    Element.WOOD: "木", Element.FIRE: "火", Element.EARTH: "土",
    Element.METAL: "金", Element.WATER: "水",
}


@dataclass(frozen=True)
class HeavenlyStem:
    chinese: str
    korean: str
    element: Element
    index: int  # 0-9 in the cycle


@dataclass(frozen=True)
class EarthlyBranch:
    chinese: str
    korean: str
    element: Element  # primary/season element
    index: int  # 0-11 in the cycle


# ============================================================
# STEM AND BRANCH DEFINITIONS
# ============================================================

HEAVENLY_STEMS = (
    HeavenlyStem("甲", "갑", Element.WOOD, 0),
    HeavenlyStem("乙", "을", Element.WOOD, 1),
    HeavenlyStem("丙", "병", Element.FIRE, 2),
    HeavenlyStem("丁", "정", Element.FIRE, 3),
    HeavenlyStem("戊", "무", Element.EARTH, 4),
    HeavenlyStem("己", "기", Element.EARTH, 5),
    HeavenlyStem("庚", "경", Element.METAL, 6),
    HeavenlyStem("辛", "신", Element.METAL, 7),
    HeavenlyStem("壬", "임", Element.WATER, 8),
    HeavenlyStem("癸", "계", Element.WATER, 9),
)

EARTHLY_BRANCHES = (
    EarthlyBranch("子", "자", Element.WATER, 0),
    EarthlyBranch("丑", "축", Element.EARTH, 1),
    EarthlyBranch("寅", "인", Element.WOOD, 2),
    EarthlyBranch("卯", "묘", Element.WOOD, 3),
    EarthlyBranch("辰", "진", Element.EARTH, 4),
    EarthlyBranch("巳", "사", Element.FIRE, 5),
    EarthlyBranch("午", "오", Element.FIRE, 6),
    EarthlyBranch("未", "미", Element.EARTH, 7),
    EarthlyBranch("申", "신", Element.METAL, 8),
    EarthlyBranch("酉", "유", Element.METAL, 9),
    EarthlyBranch("戌", "술", Element.EARTH, 10),
    EarthlyBranch("亥", "해", Element.WATER, 11),
)

# Lookup helpers. Hangul 신 is both 辛 and 申, so stems and branches
# are always looked up in their own table by position.
STEM_BY_CHAR = {s.chinese: s for s in HEAVENLY_STEMS}
STEM_BY_CHAR.update({s.korean: s for s in HEAVENLY_STEMS})
BRANCH_BY_CHAR = {b.chinese: b for b in EARTHLY_BRANCHES}
BRANCH_BY_CHAR.update({b.korean: b for b in EARTHLY_BRANCHES})


# ============================================================
# GANJI TYPES
# ============================================================

@dataclass(frozen=True)
class RawGanji:
    """A stem-branch pair as cycle indices, before annotation."""
    stem_index: int
    branch_index: int

    @property
    def sexagenary_index(self) -> int:
        return sexagenary_index(self.stem_index, self.branch_index)


@dataclass(frozen=True)
class ParsedGanji:
    stem_char: str
    stem_reading: str
    stem_element: Element
    branch_char: str
    branch_reading: str
    branch_element: Element
    stem_index: int
    branch_index: int

    @property
    def hanja(self) -> str:
        return self.stem_char + self.branch_char

    @property
    def reading(self) -> str:
        return self.stem_reading + self.branch_reading

    def __str__(self):
        return f"{self.reading}({self.hanja})"

    def to_dict(self) -> dict:
        return {
            "stem_char": self.stem_char,
            "stem_reading": self.stem_reading,
            "stem_element": self.stem_element.value,
            "branch_char": self.branch_char,
            "branch_reading": self.branch_reading,
            "branch_element": self.branch_element.value,
            "stem_index": self.stem_index,
            "branch_index": self.branch_index,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ParsedGanji":
        return cls(
            stem_char=data["stem_char"],
            stem_reading=data["stem_reading"],
            stem_element=Element(data["stem_element"]),
            branch_char=data["branch_char"],
            branch_reading=data["branch_reading"],
            branch_element=Element(data["branch_element"]),
            stem_index=data["stem_index"],
            branch_index=data["branch_index"],
        )


# ============================================================
# PARSING
# ============================================================

_PAREN_FORM = re.compile(r"^\s*(\S{2})?\s*\((\S{2})\)\s*$")


def sexagenary_index(stem_index: int, branch_index: int) -> int:
    """Position 0-59 of a pair in the 60-cycle (甲子 = 0).

    Only pairs with matching parity exist in the cycle.
    """
    if (stem_index - branch_index) % 2:
        raise UnknownGanjiCharacterError(
            f"Stem {stem_index} and branch {branch_index} never pair in the 60-cycle"
        )
    return (6 * stem_index - 5 * branch_index) % 60


def ganji_from_indices(stem_index: int, branch_index: int) -> ParsedGanji:
    for value, size in ((stem_index, 10), (branch_index, 12)):
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < size:
            raise UnknownGanjiCharacterError(
                f"Ganji index out of range: ({stem_index!r}, {branch_index!r})"
            )
    stem = HEAVENLY_STEMS[stem_index]
    branch = EARTHLY_BRANCHES[branch_index]
    # yang stems only pair with yang branches, yin with yin
    if (stem_index - branch_index) % 2:
        raise UnknownGanjiCharacterError(
            f"{stem.chinese}{branch.chinese} is not a pair of the 60-cycle"
        )
    return ParsedGanji(
        stem_char=stem.chinese,
        stem_reading=stem.korean,
        stem_element=stem.element,
        branch_char=branch.chinese,
        branch_reading=branch.korean,
        branch_element=branch.element,
        stem_index=stem.index,
        branch_index=branch.index,
    )


def _lookup_pair(text: str) -> ParsedGanji:
    stem = STEM_BY_CHAR.get(text[0])
    branch = BRANCH_BY_CHAR.get(text[1])
    if stem is None or branch is None:
        bad = text[0] if stem is None else text[1]
        raise UnknownGanjiCharacterError(f"Unknown ganji character {bad!r} in {text!r}")
    return ganji_from_indices(stem.index, branch.index)


def parse_ganji_string(value: Union[str, RawGanji, tuple, list]) -> ParsedGanji:
    """
    Normalize any representation of a stem-branch pair.

    Args:
        value: "庚午", "경오", "경오(庚午)", a RawGanji, or a
               (stem_index, branch_index) pair

    Returns:
        ParsedGanji with character, Korean reading and element for both halves

    Raises:
        UnknownGanjiCharacterError: character outside the 22 known ones,
            malformed string, or inconsistent hangul/hanja halves

    Example:
        parse_ganji_string("경오(庚午)") == parse_ganji_string((6, 6))
    """
    if isinstance(value, RawGanji):
        return ganji_from_indices(value.stem_index, value.branch_index)
    if isinstance(value, (tuple, list)):
        if len(value) != 2:
            raise UnknownGanjiCharacterError(f"Expected (stem_index, branch_index), got {value!r}")
        return ganji_from_indices(value[0], value[1])
    if not isinstance(value, str):
        raise UnknownGanjiCharacterError(f"Unsupported ganji value {value!r}")

    match = _PAREN_FORM.match(value)
    if match:
        outer, inner = match.groups()
        parsed = _lookup_pair(inner)
        if outer is not None and _lookup_pair(outer) != parsed:
            raise UnknownGanjiCharacterError(f"Reading and hanja disagree in {value!r}")
        return parsed

    text = value.strip()
    if len(text) != 2:
        raise UnknownGanjiCharacterError(f"Ganji must be two characters, got {value!r}")
    return _lookup_pair(text)
