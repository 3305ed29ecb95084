"""Tests for time_math.py - HH:MM arithmetic."""

import pytest

from time_math import (
    hour_min_to_hour_formatted,
    hour_to_minutes,
    is_negative,
    minutes_to_hour_formatted,
    multiply_time,
    subtract_time,
    sum_time,
    validate_time,
)


class TestValidateTime:
    """Tests for validate_time."""

    @pytest.mark.parametrize("value", ["00:00", "09:30", "12:00", "19:59", "23:59"])
    def test_valid_times(self, value):
        assert validate_time(value)

    @pytest.mark.parametrize(
        "value", ["9:30", "25:00", "24:00", "", "12:60", "12:5", "12-30", " 09:30", "09:30 ", "-01:00"]
    )
    def test_invalid_times(self, value):
        assert not validate_time(value)

    def test_non_string_is_invalid(self):
        """None and other types are invalid rather than raising."""
        assert not validate_time(None)
        assert not validate_time(930)


class TestFormatting:
    """Tests for formatting helpers."""

    def test_hour_min_pads(self):
        assert hour_min_to_hour_formatted(9, 5) == "09:05"
        assert hour_min_to_hour_formatted(17, 45) == "17:45"

    def test_long_durations_keep_hours(self):
        assert minutes_to_hour_formatted(160 * 60) == "160:00"

    def test_negative_minutes(self):
        assert minutes_to_hour_formatted(-90) == "-01:30"
        assert minutes_to_hour_formatted(-5) == "-00:05"

    def test_hour_to_minutes(self):
        assert hour_to_minutes("01:30") == 90
        assert hour_to_minutes("-01:30") == -90
        assert hour_to_minutes("160:00") == 9600


class TestArithmetic:
    """Tests for sum_time, subtract_time and multiply_time."""

    def test_sum(self):
        assert sum_time("09:00", "08:00") == "17:00"
        assert sum_time("00:45", "00:30") == "01:15"

    def test_subtract_is_second_minus_first(self):
        assert subtract_time("12:00", "13:00") == "01:00"
        assert subtract_time("09:00", "18:00") == "09:00"

    def test_subtract_goes_negative(self):
        """Negative durations are first-class, not clamped."""
        result = subtract_time("08:00", "07:30")
        assert result == "-00:30"
        assert is_negative(result)

    def test_negative_values_keep_adding_up(self):
        deficit = subtract_time("08:00", "06:00")
        assert sum_time(deficit, "03:00") == "01:00"
        assert sum_time(deficit, "-01:00") == "-03:00"
        assert subtract_time(deficit, "00:00") == "02:00"

    def test_multiply(self):
        assert multiply_time("08:00", 3) == "24:00"
        assert multiply_time("07:30", -2) == "-15:00"
        assert multiply_time("08:00", 0) == "00:00"

    def test_zero_is_not_negative(self):
        assert not is_negative("00:00")
        assert not is_negative(multiply_time("08:00", -0))

    @pytest.mark.parametrize(
        "a,b", [("09:00", "17:30"), ("00:00", "23:59"), ("12:15", "12:15"), ("06:07", "19:48")]
    )
    def test_sum_of_difference_returns_end(self, a, b):
        assert sum_time(a, subtract_time(a, b)) == b

    @pytest.mark.parametrize("a,b", [("09:00", "17:30"), ("00:00", "23:59"), ("06:07", "19:48")])
    def test_difference_of_sum_returns_operand(self, a, b):
        assert subtract_time(a, sum_time(a, b)) == b
