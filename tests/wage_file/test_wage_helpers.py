"""Tests for wage file helper functions."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from wps_modules.wage_file.helpers import (
    build_file_name,
    coerce_amount,
    coerce_date,
    from_minor_units,
    to_minor_units,
)


class TestMinorUnits:

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (Decimal("5000.00"), 500000),
            (Decimal("7250.50"), 725050),
            (Decimal("0"), 0),
            (Decimal("0.01"), 1),
            (Decimal("0.005"), 1),
            (Decimal("0.004"), 0),
            (Decimal("1.015"), 102),
            (Decimal("1.025"), 103),
        ],
    )
    def test_rounds_half_up(self, amount, expected):
        assert to_minor_units(amount) == expected

    def test_exponent_zero(self):
        assert to_minor_units(Decimal("1500.5"), exponent=0) == 1501

    def test_exponent_three(self):
        assert to_minor_units(Decimal("12.3456"), exponent=3) == 12346

    def test_large_amount_keeps_precision(self):
        assert to_minor_units(Decimal("123456789012.34")) == 12345678901234

    def test_from_minor_units(self):
        assert from_minor_units(725050) == Decimal("7250.50")
        assert from_minor_units(1501, exponent=0) == Decimal("1501")


class TestCoerceAmount:

    def test_decimal_passes_through(self):
        assert coerce_amount(Decimal("7250.50")) == Decimal("7250.50")

    def test_int(self):
        assert coerce_amount(5000) == Decimal("5000")

    def test_numeric_string(self):
        assert coerce_amount(" 7250.50 ") == Decimal("7250.50")

    def test_thousands_separator_is_stripped(self):
        assert coerce_amount("12,250.50") == Decimal("12250.50")

    def test_float_is_rejected(self):
        with pytest.raises(ValueError):
            coerce_amount(7250.5)

    def test_bool_is_rejected(self):
        with pytest.raises(ValueError):
            coerce_amount(True)

    def test_non_numeric_string_is_rejected(self):
        with pytest.raises(ValueError, match="not a number"):
            coerce_amount("abc")

    @pytest.mark.parametrize("value", [Decimal("NaN"), Decimal("Infinity"), "-Infinity"])
    def test_non_finite_is_rejected(self, value):
        with pytest.raises(ValueError, match="finite"):
            coerce_amount(value)

    def test_none_is_rejected(self):
        with pytest.raises(ValueError):
            coerce_amount(None)


class TestCoerceDate:

    def test_date(self):
        assert coerce_date(date(2025, 3, 31)) == date(2025, 3, 31)

    def test_datetime_is_narrowed(self):
        assert coerce_date(datetime(2025, 3, 31, 8, 0)) == date(2025, 3, 31)

    def test_iso_string(self):
        assert coerce_date("2025-03-31") == date(2025, 3, 31)

    def test_invalid_string(self):
        with pytest.raises(ValueError):
            coerce_date("31/03/2025")

    def test_other_type(self):
        with pytest.raises(ValueError):
            coerce_date(20250331)


class TestBuildFileName:

    def test_default_naming(self):
        assert build_file_name("2025-03", date(2025, 3, 31)) == "WAGE_2025-03_20250331.sif"

    def test_custom_prefix_and_extension(self):
        name = build_file_name("2025-03", date(2025, 3, 31), prefix="SAL", extension="txt")
        assert name == "SAL_2025-03_20250331.txt"
