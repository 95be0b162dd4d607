"""Tests for the Decimal-backed arithmetic helpers."""

import math

import pytest

from gapfill.utils.safe_math import DecimalSafeMath


@pytest.fixture
def safe_math():
    return DecimalSafeMath()


def test_add_has_no_binary_drift(safe_math):
    assert safe_math.add(0.1, 0.2) == 0.3
    assert safe_math.subtract(0.3, 0.1) == 0.2
    assert safe_math.total([0.1, 0.2, 0.3]) == 0.6


def test_average(safe_math):
    assert safe_math.average([10.0, 40.0]) == 25.0
    assert math.isnan(safe_math.average([]))


def test_lerp(safe_math):
    assert safe_math.lerp(10.0, 40.0, 0.0) == 10.0
    assert safe_math.lerp(10.0, 40.0, 1.0) == 40.0
    assert safe_math.lerp(10.0, 40.0, 0.5) == 25.0


def test_lerp_third_rounds_cleanly(safe_math):
    value = safe_math.lerp(10.0, 40.0, 1 / 3)
    assert safe_math.round(value, 10) == 20.0


def test_clamp_accepts_reversed_bounds(safe_math):
    assert safe_math.clamp(5.0, 10.0, 0.0) == 5.0
    assert safe_math.clamp(-1.0, 10.0, 0.0) == 0.0
    assert safe_math.clamp(11.0, 0.0, 10.0) == 10.0


def test_round_half_away_from_zero(safe_math):
    assert safe_math.round(2.5, 0) == 3.0
    assert safe_math.round(-2.5, 0) == -3.0
    assert safe_math.round(1.005, 2) == 1.01


def test_non_finite_values_fall_back(safe_math):
    assert math.isnan(safe_math.round(math.nan, 2))
    assert safe_math.add(math.inf, 1.0) == math.inf
    with pytest.raises(ValueError):
        DecimalSafeMath.to_decimal(math.nan)


def test_are_equal():
    assert DecimalSafeMath.are_equal(0.1 + 0.2, 0.3)
    assert not DecimalSafeMath.are_equal(math.nan, math.nan)
