"""Tests for Decimal money helpers."""

from decimal import ROUND_HALF_EVEN, Decimal

import pytest

from ledger_kernel.domain.values import ZERO, is_zero, min_unit, round_money, to_decimal


class TestToDecimal:
    def test_none_is_zero(self):
        assert to_decimal(None) == ZERO

    def test_float_goes_through_string(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_int_and_str(self):
        assert to_decimal(5) == Decimal("5")
        assert to_decimal("11800.50") == Decimal("11800.50")

    def test_decimal_passthrough(self):
        value = Decimal("1.005")
        assert to_decimal(value) is value

    def test_bool_rejected(self):
        with pytest.raises(ValueError, match="Boolean"):
            to_decimal(True)

    def test_garbage_rejected(self):
        with pytest.raises(ValueError, match="Invalid monetary amount"):
            to_decimal("twelve")


class TestRoundMoney:
    def test_half_up_by_default(self):
        assert round_money(Decimal("2.345")) == Decimal("2.35")
        assert round_money(Decimal("-2.345")) == Decimal("-2.35")

    def test_precision(self):
        assert round_money(Decimal("1.23456"), 3) == Decimal("1.235")
        assert round_money(Decimal("7.5"), 0) == Decimal("8")

    def test_explicit_rounding_mode(self):
        assert round_money(Decimal("2.345"), 2, ROUND_HALF_EVEN) == Decimal("2.34")


class TestMinUnitAndIsZero:
    def test_min_unit(self):
        assert min_unit(2) == Decimal("0.01")
        assert min_unit(0) == Decimal("1")

    def test_is_zero_after_rounding(self):
        assert is_zero(Decimal("0.004"))
        assert not is_zero(Decimal("0.005"))
