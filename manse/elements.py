"""
Five-element (오행) distribution over the pillars.

One point per visible stem and per branch; hidden stems (지장간) are not
counted. Unavailable pillars (hour without a birth time) contribute nothing.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from manse.errors import ElementTotalMismatchError
from manse.ganji import Element

logger = logging.getLogger(__name__)

ELEMENT_TOTAL_WITH_HOUR = 8
ELEMENT_TOTAL_WITHOUT_HOUR = 6


@dataclass(frozen=True)
class ElementDistribution:
    wood: int = 0
    fire: int = 0
    earth: int = 0
    metal: int = 0
    water: int = 0
    total: int = 0

    def count(self, element: Element) -> int:
        return getattr(self, element.value)

    def to_dict(self) -> dict:
        return {
            "wood": self.wood,
            "fire": self.fire,
            "earth": self.earth,
            "metal": self.metal,
            "water": self.water,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ElementDistribution":
        return cls(**{key: data[key] for key in ("wood", "fire", "earth", "metal", "water", "total")})


def expected_element_total(has_time: bool) -> int:
    return ELEMENT_TOTAL_WITH_HOUR if has_time else ELEMENT_TOTAL_WITHOUT_HOUR


def calc_elements(pillars: Iterable) -> ElementDistribution:
    """
    Count stem and branch elements across available pillars.

    Args:
        pillars: PillarOutput-like objects with `is_available` and `ganji`

    Returns:
        ElementDistribution whose total is the number of counted characters
    """
    counts = {e: 0 for e in Element}
    for pillar in pillars:
        if not pillar.is_available:
            continue
        counts[pillar.ganji.stem_element] += 1
        counts[pillar.ganji.branch_element] += 1

    return ElementDistribution(
        **{e.value: n for e, n in counts.items()},
        total=sum(counts.values()),
    )


def validate_element_distribution(dist: ElementDistribution, expected_total: int) -> None:
    """
    Assert the distribution is internally consistent.

    Raises:
        ElementTotalMismatchError: total differs from expected_total or from
            the sum of the five counts
    """
    summed = dist.wood + dist.fire + dist.earth + dist.metal + dist.water
    if dist.total != expected_total or summed != dist.total:
        logger.error("Element distribution %s fails total check (expected %d)",
                     dist.to_dict(), expected_total)
        actual = dist.total if dist.total != expected_total else summed
        raise ElementTotalMismatchError(actual, expected_total)
