"""Tests for optvault/core/fixed_point.py."""

from __future__ import annotations

from fractions import Fraction

import pytest

from optvault.core.errors import InvalidAmount
from optvault.core.fixed_point import (
    MAX_AMOUNT,
    FixedPoint,
    checked_add,
    floor_fraction,
    pow10,
    require_amount,
)


class TestPow10:
    def test_positive(self):
        assert pow10(3) == 1000

    def test_negative_is_exact(self):
        assert pow10(-18) == Fraction(1, 10**18)

    def test_zero(self):
        assert pow10(0) == 1


class TestFloorFraction:
    def test_positive_rounds_down(self):
        assert floor_fraction(Fraction(99999999, 10)) == 9999999

    def test_negative_rounds_toward_minus_inf(self):
        assert floor_fraction(Fraction(-3, 2)) == -2

    def test_integral(self):
        assert floor_fraction(Fraction(10, 2)) == 5


class TestParse:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1.6", FixedPoint(16, -1)),
            ("0.01", FixedPoint(1, -2)),
            ("90", FixedPoint(90, 0)),
            (90, FixedPoint(90, 0)),
            ("1E+3", FixedPoint(1, 3)),
            ("-2.5", FixedPoint(-25, -1)),
            ({"value": 90, "exponent": -18}, FixedPoint(90, -18)),
            ({"value": 7}, FixedPoint(7, 0)),
        ],
    )
    def test_accepted_forms(self, raw, expected):
        assert FixedPoint.parse(raw) == expected

    def test_fixed_point_passthrough(self):
        fp = FixedPoint(5, -1)
        assert FixedPoint.parse(fp) is fp

    @pytest.mark.parametrize("raw", ["abc", "NaN", "Infinity", ""])
    def test_rejects_non_numbers(self, raw):
        with pytest.raises(ValueError):
            FixedPoint.parse(raw)

    def test_rejects_mapping_without_value(self):
        with pytest.raises(ValueError, match="requires 'value'"):
            FixedPoint.parse({"exponent": 1})

    def test_rejects_float(self):
        with pytest.raises(TypeError):
            FixedPoint.parse(1.5)


class TestFixedPoint:
    def test_to_fraction(self):
        assert FixedPoint(16, -1).to_fraction() == Fraction(8, 5)

    def test_str(self):
        assert str(FixedPoint(16, -1)) == "1.6"
        assert str(FixedPoint(90)) == "90"

    def test_equal_values_different_scales_compare_by_fraction(self):
        assert FixedPoint(5, -1).to_fraction() == FixedPoint(50, -2).to_fraction()

    def test_rejects_bool_value(self):
        with pytest.raises(TypeError):
            FixedPoint(True)

    def test_rejects_huge_exponent(self):
        with pytest.raises(ValueError, match="exponent out of range"):
            FixedPoint(1, 1000)

    def test_is_positive(self):
        assert FixedPoint(1, -30).is_positive()
        assert not FixedPoint(0).is_positive()


class TestRequireAmount:
    def test_accepts_positive(self):
        assert require_amount(1) == 1
        assert require_amount(MAX_AMOUNT) == MAX_AMOUNT

    @pytest.mark.parametrize("bad", [0, -1, MAX_AMOUNT + 1])
    def test_rejects_out_of_domain(self, bad):
        with pytest.raises(InvalidAmount):
            require_amount(bad)

    @pytest.mark.parametrize("bad", [True, 1.0, "1", None])
    def test_rejects_non_int(self, bad):
        with pytest.raises(InvalidAmount, match="must be an int"):
            require_amount(bad)

    def test_name_in_message(self):
        with pytest.raises(InvalidAmount, match="repay_amount"):
            require_amount(0, name="repay_amount")


class TestCheckedAdd:
    def test_within_bound(self):
        assert checked_add(MAX_AMOUNT - 1, 1) == MAX_AMOUNT

    def test_overflow_rejected(self):
        with pytest.raises(InvalidAmount, match="MAX_AMOUNT"):
            checked_add(MAX_AMOUNT, 1)
