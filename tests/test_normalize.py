"""Birth input validation and normalization"""

from datetime import date

import pytest

from manse.errors import InputError, InvalidDateError, InvalidTimeError
from manse.lunar import LunarDate
from manse.normalize import (
    BirthInput, CalendarType, local_mean_time, normalize_input, resolve_timezone,
)

SEOUL = (37.5665, 126.978)


class TestSolarInput:
    def test_basic(self, make_birth):
        n = normalize_input(make_birth())
        assert (n.year, n.month, n.day, n.hour, n.minute) == (1990, 8, 20, 9, 0)
        assert n.has_time is True
        assert n.converted_from_lunar is False
        assert n.lunar == LunarDate(1990, 7, 1, False)
        assert n.solar_date == date(1990, 8, 20)
        assert n.timezone == "Asia/Seoul"

    def test_form_strings_are_coerced(self):
        n = normalize_input(BirthInput("1990", "08", "20", hour="9", minute="05",
                                       calendar_type="양력", has_time="true"))
        assert (n.year, n.month, n.day, n.hour, n.minute) == (1990, 8, 20, 9, 5)

    def test_no_time_means_absent_not_midnight(self, make_birth):
        n = normalize_input(make_birth(hour=9, minute=30, has_time=False))
        assert n.hour is None
        assert n.minute is None
        assert n.has_time is False
        # month/year boundary checks use local noon as the stand-in
        assert n.birth_instant.hour == 12

    def test_minute_defaults_to_zero(self, make_birth):
        assert normalize_input(make_birth(hour=7, minute=None)).minute == 0

    @pytest.mark.parametrize("month, day", [(4, 31), (2, 30), (2, 29), (13, 1), (0, 1), (6, 0)])
    def test_nonexistent_dates(self, make_birth, month, day):
        with pytest.raises(InvalidDateError):
            normalize_input(make_birth(year=1990, month=month, day=day))

    def test_leap_day_in_leap_year(self, make_birth):
        assert normalize_input(make_birth(year=1992, month=2, day=29)).day == 29

    @pytest.mark.parametrize("year", [1899, 2050, 990, 12345])
    def test_year_out_of_range(self, make_birth, year):
        with pytest.raises(InvalidDateError):
            normalize_input(make_birth(year=year))

    @pytest.mark.parametrize("value", ["abc", "", True, 19.5, None, "--5", "²", "1990.0", "19 90"])
    def test_non_numeric_year(self, make_birth, value):
        with pytest.raises(InvalidDateError):
            normalize_input(make_birth(year=value))

    def test_unknown_calendar_type(self, make_birth):
        with pytest.raises(InvalidDateError):
            normalize_input(make_birth(calendar_type="julian"))

    def test_input_errors_are_value_errors(self, make_birth):
        with pytest.raises(ValueError):
            normalize_input(make_birth(month=4, day=31))
        assert issubclass(InvalidTimeError, InputError)


class TestTime:
    @pytest.mark.parametrize("hour, minute", [(24, 0), (-1, 0), (12, 60), (12, -5)])
    def test_out_of_range(self, make_birth, hour, minute):
        with pytest.raises(InvalidTimeError):
            normalize_input(make_birth(hour=hour, minute=minute))

    def test_has_time_without_hour(self, make_birth):
        with pytest.raises(InvalidTimeError):
            normalize_input(make_birth(hour=None, has_time=True))

    @pytest.mark.parametrize("hour", ["nine", "--9", "²", "9h"])
    def test_non_numeric_hour(self, make_birth, hour):
        with pytest.raises(InvalidTimeError):
            normalize_input(make_birth(hour=hour))

    def test_non_numeric_minute(self, make_birth):
        with pytest.raises(InvalidTimeError):
            normalize_input(make_birth(hour=9, minute="³0"))

    def test_negative_string_is_a_range_error(self, make_birth):
        with pytest.raises(InvalidTimeError):
            normalize_input(make_birth(hour="-1"))

    def test_out_of_range_time_ignored_without_has_time(self, make_birth):
        assert normalize_input(make_birth(hour=99, has_time=False)).hour is None


class TestLunarInput:
    def test_converted_to_solar(self, make_birth):
        n = normalize_input(make_birth(year=1956, month=1, day=21, calendar_type="lunar"))
        assert n.solar_date == date(1956, 3, 3)
        assert n.converted_from_lunar is True
        assert n.lunar == LunarDate(1956, 1, 21, False)

    def test_korean_label(self, make_birth):
        n = normalize_input(make_birth(year=1956, month=1, day=21, calendar_type="음력"))
        assert n.solar_date == date(1956, 3, 3)

    def test_leap_flag_unset_picks_regular_month(self, make_birth):
        n = normalize_input(make_birth(year=2023, month=2, day=15, calendar_type=CalendarType.LUNAR))
        assert n.solar_date == date(2023, 3, 6)
        assert n.lunar.is_leap_month is False

    def test_leap_flag_picks_leap_month(self, make_birth):
        n = normalize_input(make_birth(year=2023, month=2, day=15,
                                       calendar_type=CalendarType.LUNAR, is_leap_month=True))
        assert n.solar_date == date(2023, 4, 5)
        assert n.lunar.is_leap_month is True

    def test_leap_flag_without_leap_month(self, make_birth):
        with pytest.raises(InvalidDateError):
            normalize_input(make_birth(year=2023, month=5, day=1,
                                       calendar_type="lunar", is_leap_month=True))

    def test_leap_flag_ignored_for_solar(self, make_birth):
        n = normalize_input(make_birth(is_leap_month=True))
        assert n.solar_date == date(1990, 8, 20)

    def test_lunar_day_31(self, make_birth):
        with pytest.raises(InvalidDateError):
            normalize_input(make_birth(year=2023, month=1, day=31, calendar_type="lunar"))


class TestTimezone:
    def test_default(self):
        assert resolve_timezone().key == "Asia/Seoul"

    def test_explicit(self):
        assert resolve_timezone("America/Los_Angeles").key == "America/Los_Angeles"

    def test_from_coordinates(self):
        assert resolve_timezone(latitude=SEOUL[0], longitude=SEOUL[1]).key == "Asia/Seoul"
        assert resolve_timezone(latitude=37.7749, longitude=-122.4194).key == "America/Los_Angeles"

    def test_explicit_wins_over_coordinates(self):
        assert resolve_timezone("UTC", *SEOUL).key == "UTC"

    def test_unknown_name(self):
        with pytest.raises(InvalidTimeError):
            resolve_timezone("Mars/Olympus_Mons")

    def test_bad_coordinates(self):
        with pytest.raises(InvalidTimeError):
            resolve_timezone(latitude=95.0, longitude=10.0)

    def test_birth_instant_is_aware(self, make_birth):
        n = normalize_input(make_birth(timezone="UTC"))
        assert n.birth_instant.utcoffset().total_seconds() == 0
        assert n.timezone == "UTC"


class TestSolarTime:
    def test_seoul_lmt(self, make_birth):
        n = normalize_input(make_birth(hour=11, minute=20, latitude=SEOUL[0],
                                       longitude=SEOUL[1], use_solar_time=True))
        assert (n.hour, n.minute) == (10, 47)
        assert n.lmt_correction_minutes == pytest.approx(-32.088)
        assert n.solar_time_applied is True
        # physical moment is unchanged
        assert n.birth_instant.hour == 11

    def test_without_flag_clock_time_is_used(self, make_birth):
        n = normalize_input(make_birth(hour=11, minute=20, latitude=SEOUL[0], longitude=SEOUL[1]))
        assert (n.hour, n.minute) == (11, 20)
        assert n.solar_time_applied is False

    def test_shift_across_midnight_moves_the_day(self, make_birth):
        n = normalize_input(make_birth(hour=0, minute=10, longitude=SEOUL[1], use_solar_time=True))
        assert (n.month, n.day, n.hour) == (8, 19, 23)
        assert n.birth_instant.day == 20

    def test_korean_dst_is_stripped(self, make_birth):
        # Korea observed DST in summer 1988 (UTC+10)
        n = normalize_input(make_birth(year=1988, month=7, day=1, hour=12, minute=0,
                                       longitude=SEOUL[1], use_solar_time=True))
        assert (n.hour, n.minute) == (10, 27)

    def test_needs_longitude(self, make_birth):
        with pytest.raises(InvalidTimeError):
            normalize_input(make_birth(use_solar_time=True))

    def test_unknown_time_is_not_corrected(self, make_birth):
        n = normalize_input(make_birth(hour=None, longitude=SEOUL[1], use_solar_time=True))
        assert n.hour is None
        assert n.solar_time_applied is False

    def test_local_mean_time_helper(self, kst):
        from datetime import datetime
        lmt, correction = local_mean_time(datetime(1990, 3, 15, 11, 20, tzinfo=kst), SEOUL[1])
        assert lmt.tzinfo is None
        assert (lmt.hour, lmt.minute) == (10, 47)
        assert correction == pytest.approx(-32.088)
