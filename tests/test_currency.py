from decimal import Decimal

import pytest

from currency import conversion_factor, convert_to_base_currency, round_money


def test_same_currency_returns_amount_unchanged():
    assert convert_to_base_currency(100, "EUR", "EUR", {}) == 100


def test_converts_with_rate():
    # 385 THB / 38.5 = 10 EUR
    assert convert_to_base_currency(385, "THB", "EUR", {"THB": 38.5}) == 10


def test_missing_rate_falls_back_to_face_value():
    assert convert_to_base_currency(100, "XYZ", "EUR", {}) == 100


def test_zero_or_negative_rate_falls_back_to_face_value():
    assert convert_to_base_currency(100, "USD", "EUR", {"USD": 0}) == 100
    assert convert_to_base_currency(100, "USD", "EUR", {"USD": -1.2}) == 100


def test_no_rates_at_all():
    assert convert_to_base_currency(42.5, "USD", "EUR", None) == Decimal("42.5")


def test_conversion_factor():
    assert conversion_factor(385, "THB", "EUR", {"THB": 38.5}) == Decimal("10") / Decimal("385")
    assert conversion_factor(0, "THB", "EUR", {"THB": 38.5}) == 1
    assert conversion_factor(50, "EUR", "EUR", {}) == 1


def test_round_money_rounds_half_up():
    assert round_money(Decimal("2.345")) == 2.35
    assert round_money(Decimal("181.8181818")) == 181.82


@pytest.mark.parametrize("rate", [float("nan"), float("inf"), "NaN"])
def test_non_finite_rate_falls_back_to_face_value(rate):
    assert convert_to_base_currency(100, "USD", "EUR", {"USD": rate}) == 100
    assert conversion_factor(100, "USD", "EUR", {"USD": rate}) == 1
