# tests/test_money.py

import copy
import pytest
from decimal import Decimal

from core.money import Money, percent_of, rate_from_percent


@pytest.mark.parametrize("raw, expected", [
    ("1.005", "1.01"),
    ("1.004", "1.00"),
    ("-1.005", "-1.01"),
    ("0.125", "0.13"),
    ("100", "100.00"),
    (Decimal("2.675"), "2.68"),
    (7, "7.00"),
])
def test_round_half_up(raw, expected):
    assert str(Money.round(raw)) == expected


@pytest.mark.parametrize("raw", ["0.005", "1.015", "-3.335", "99.999", "12"])
def test_round_is_idempotent(raw):
    once = Money.round(raw)
    assert Money.round(once) == once
    assert Money.round(once.to_decimal()) == once


def test_tax_rate_round_trip():
    subtotal = Money.round("100.00")
    total = subtotal.multiply_by_rate(Decimal("0.13"))

    assert total == Money.round("113.00")
    assert total.divide_by_rate(Decimal("0.13")) == subtotal


@pytest.mark.parametrize("amount, count, expected", [
    ("100.00", 3, "33.33"),
    ("0.05", 2, "0.03"),
    ("339.00", 3, "113.00"),
])
def test_divide_by_int(amount, count, expected):
    assert str(Money.round(amount).divide_by_int(count)) == expected


def test_divide_by_zero_count():
    with pytest.raises(ZeroDivisionError):
        Money.round("10").divide_by_int(0)


def test_floats_are_refused():
    with pytest.raises(TypeError):
        Money.round(0.1)
    with pytest.raises(ValueError):
        Money.parse(0.1)


@pytest.mark.parametrize("raw", [None, "", "   ", "abc", "NaN", "Infinity"])
def test_parse_rejects_malformed_input(raw):
    with pytest.raises(ValueError):
        Money.parse(raw)


def test_arithmetic_and_comparison():
    a = Money.round("50.00")
    b = Money.round("63.00")

    assert a + b == Money.round("113.00")
    assert (a - b).is_negative()
    assert -a == Money.round("-50.00")
    assert a < b
    assert Money.sum([a, b, "0.01"]) == Money.round("113.01")
    assert Money.zero().is_zero()


def test_boundary_conversion():
    amount = Money.round("113")

    assert amount.to_decimal() == Decimal("113.00")
    assert str(amount.to_decimal()) == "113.00"
    assert str(Money.zero()) == "0.00"
    assert repr(amount) == "Money('113.00')"
    assert Money.from_decimal(None) == Money.zero()


def test_money_requires_integer_cents():
    with pytest.raises(TypeError):
        Money(Decimal("1.00"))


def test_money_is_immutable():
    amount = Money.round("113.00")
    prices = {amount: "mensualidad"}

    with pytest.raises(AttributeError):
        amount.cents = 1
    with pytest.raises(AttributeError):
        del amount.cents

    assert prices[Money.round("113")] == "mensualidad"
    assert copy.deepcopy(amount) == amount


def test_helpers():
    assert rate_from_percent(Decimal("13.00")) == Decimal("0.13")
    assert rate_from_percent(None) == Decimal("0")
    assert percent_of(Money.round("13"), Money.round("100")) == Decimal("13.00")
    assert percent_of(Money.round("1"), Money.round("3")) == Decimal("33.33")
    assert percent_of(Money.round("5"), Money.zero()) == Decimal("0.00")
