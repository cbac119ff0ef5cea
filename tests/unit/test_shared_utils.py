"""Shared numeric helper tests."""

import math

import pytest

from calculations.shared import (
    clamp,
    correlation,
    interpolate,
    is_valid_number,
    is_valid_url,
    mean,
    median,
    normalize,
    percentile,
    round_half_up,
    standard_deviation,
)


class TestMath:

    def test_round_half_up(self):
        assert round_half_up(2.345, 1) == 2.3
        assert round_half_up(2.5, 0) == 3
        assert round_half_up(-2.5, 0) == -2

    def test_clamp(self):
        assert clamp(5, 0, 3) == 3
        assert clamp(-1, 0, 3) == 0
        assert clamp(2, 0, 3) == 2

    def test_normalize_and_interpolate(self):
        assert normalize(15, 10, 20) == 0.5
        assert interpolate(10, 20, 0.25) == 12.5


class TestStatistics:

    def test_empty_inputs_yield_zero(self):
        assert mean([]) == 0
        assert median([]) == 0
        assert standard_deviation([]) == 0
        assert percentile([], 50) == 0

    def test_mean_median(self):
        assert mean([1, 2, 3, 4]) == 2.5
        assert median([3, 1, 2]) == 2
        assert median([4, 1, 3, 2]) == 2.5

    def test_population_standard_deviation(self):
        assert standard_deviation([2, 4, 4, 4, 5, 5, 7, 9]) == 2.0

    def test_percentile(self):
        values = [10, 20, 30, 40, 50]
        assert percentile(values, 0) == 10
        assert percentile(values, 50) == 30
        assert percentile(values, 100) == 50
        assert percentile(values, 25) == 20

    def test_correlation(self):
        assert correlation([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
        assert correlation([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)
        assert correlation([1, 2, 3], [5, 5, 5]) == 0
        assert correlation([1, 2], [1, 2, 3]) == 0


class TestValidation:

    @pytest.mark.parametrize("value", [0, -3, 2.5, 1e9])
    def test_valid_numbers(self, value):
        assert is_valid_number(value) is True

    @pytest.mark.parametrize("value", [True, None, "3", math.nan, math.inf, 10**400])
    def test_invalid_numbers(self, value):
        assert is_valid_number(value) is False

    def test_urls(self):
        assert is_valid_url("http://localhost:8000") is True
        assert is_valid_url("localhost:8000/health") is False
        assert is_valid_url("") is False
