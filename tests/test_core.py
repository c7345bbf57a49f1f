"""Tests for raw value helpers."""

from datetime import datetime

import pytest

from chart_form.core import is_empty, is_numeric, parse_timestamp, to_number


class TestIsEmpty:
    """Tests for the absent-value rule."""

    @pytest.mark.parametrize("value", [None, "", [], {}, (), set()])
    def test_empty(self, value) -> None:
        assert is_empty(value)

    @pytest.mark.parametrize("value", [0, 0.0, False, " ", "0", [None], {"a": None}])
    def test_not_empty(self, value) -> None:
        assert not is_empty(value)


class TestToNumber:
    """Tests for numeric parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [(72, 72.0), (36.6, 36.6), ("98", 98.0), (" 1.5 ", 1.5), ("-3", -3.0), (0, 0.0)],
    )
    def test_numbers(self, value, expected: float) -> None:
        assert to_number(value) == expected

    @pytest.mark.parametrize(
        "value", [True, False, "abc", "", None, "nan", "inf", float("nan"), [1], {"v": 1}]
    )
    def test_not_numbers(self, value) -> None:
        assert to_number(value) is None

    def test_int_too_large_for_float(self) -> None:
        assert to_number(10**400) is None
        assert to_number(-(10**400)) is None

    @pytest.mark.parametrize("value", ["1_000", "0x10", "1,5", "12abc", "1e400"])
    def test_non_decimal_strings(self, value: str) -> None:
        assert to_number(value) is None

    @pytest.mark.parametrize(
        "value,expected", [("1e3", 1000.0), (".5", 0.5), ("+7", 7.0), ("3.", 3.0)]
    )
    def test_decimal_and_exponent_strings(self, value: str, expected: float) -> None:
        assert to_number(value) == expected

    def test_is_numeric(self) -> None:
        assert is_numeric("12")
        assert not is_numeric("twelve")


class TestParseTimestamp:
    """Tests for lenient timestamp parsing."""

    def test_iso(self) -> None:
        assert parse_timestamp("2025-01-15T10:30:00") == datetime(2025, 1, 15, 10, 30)

    def test_date_only(self) -> None:
        assert parse_timestamp("2025-01-15") == datetime(2025, 1, 15)

    def test_datetime_passthrough(self) -> None:
        value = datetime(2025, 1, 15)
        assert parse_timestamp(value) is value

    @pytest.mark.parametrize("value", ["not a date", "", "   ", None, 20250115])
    def test_unparseable(self, value) -> None:
        assert parse_timestamp(value) is None
