"""Five-element counting and the total check"""

import pytest

from manse.calculator import PillarOutput
from manse.elements import (
    ELEMENT_TOTAL_WITH_HOUR, ELEMENT_TOTAL_WITHOUT_HOUR, ElementDistribution,
    calc_elements, expected_element_total, validate_element_distribution,
)
from manse.errors import CalculationIntegrityError, ElementTotalMismatchError
from manse.ganji import Element, parse_ganji_string


def pillars(year, month, day, hour=None):
    return [
        PillarOutput("year", parse_ganji_string(year), True),
        PillarOutput("month", parse_ganji_string(month), True),
        PillarOutput("day", parse_ganji_string(day), True),
        PillarOutput("hour", parse_ganji_string(hour) if hour else None, hour is not None),
    ]


class TestCalcElements:
    def test_full_chart(self):
        dist = calc_elements(pillars("庚午", "甲申", "丁巳", "乙巳"))
        assert dist.to_dict() == {"wood": 2, "fire": 4, "earth": 0, "metal": 2, "water": 0, "total": 8}

    def test_missing_hour_contributes_nothing(self):
        dist = calc_elements(pillars("庚午", "甲申", "丁巳"))
        assert dist.to_dict() == {"wood": 1, "fire": 3, "earth": 0, "metal": 2, "water": 0, "total": 6}

    def test_earth_heavy_chart(self):
        dist = calc_elements(pillars("戊辰", "己未", "戊戌", "己丑"))
        assert dist.count(Element.EARTH) == 8
        assert dist.total == 8

    def test_hidden_stems_not_counted(self):
        # 寅 holds 甲丙戊 internally; only its own element (wood) counts
        dist = calc_elements(pillars("甲寅", "甲寅", "甲寅", "甲寅"))
        assert dist.wood == 8
        assert dist.fire == dist.earth == 0


class TestValidation:
    def test_expected_totals(self):
        assert expected_element_total(True) == ELEMENT_TOTAL_WITH_HOUR == 8
        assert expected_element_total(False) == ELEMENT_TOTAL_WITHOUT_HOUR == 6

    def test_consistent_distribution_passes(self):
        validate_element_distribution(ElementDistribution(2, 4, 0, 2, 0, 8), 8)

    def test_wrong_total(self):
        with pytest.raises(ElementTotalMismatchError) as exc:
            validate_element_distribution(ElementDistribution(2, 4, 0, 2, 0, 8), 6)
        assert exc.value.actual == 8
        assert exc.value.expected == 6

    def test_counts_do_not_sum_to_total(self):
        with pytest.raises(ElementTotalMismatchError) as exc:
            validate_element_distribution(ElementDistribution(2, 4, 0, 1, 0, 8), 8)
        assert exc.value.actual == 7

    def test_mismatch_is_an_integrity_error(self):
        with pytest.raises(CalculationIntegrityError):
            validate_element_distribution(ElementDistribution(total=5), 6)

    def test_dict_round_trip(self):
        dist = ElementDistribution(1, 3, 0, 2, 0, 6)
        assert ElementDistribution.from_dict(dist.to_dict()) == dist
