"""Tests for statistical primitives."""

import math

import numpy as np
import pytest

from grid_band_backtester.core import stats
from tests.conftest import make_prices


class TestLogReturns:

    def test_basic(self):
        rets = stats.log_returns([100.0, 110.0, 99.0])
        assert rets == pytest.approx([math.log(1.1), math.log(0.9)])

    def test_skips_non_positive_pairs(self):
        rets = stats.log_returns([100.0, 110.0, 0.0, 121.0, 133.1])
        assert rets == pytest.approx([math.log(1.1), math.log(1.1)])

    def test_empty_and_singleton(self):
        assert stats.log_returns([]) == []
        assert stats.log_returns([100.0]) == []


class TestStdev:

    def test_sample_stdev(self):
        values = [2, 4, 4, 4, 5, 5, 7, 9]
        assert stats.stdev(values) == pytest.approx(math.sqrt(32 / 7))

    def test_fewer_than_two(self):
        assert stats.stdev([]) == 0.0
        assert stats.stdev([3.5]) == 0.0

    def test_constant(self):
        assert stats.stdev([1.0] * 10) == 0.0


class TestMedian:

    def test_odd(self):
        assert stats.median([3, 1, 2]) == 2

    def test_even_averages_middle(self):
        assert stats.median([4, 1, 3, 2]) == 2.5

    def test_empty(self):
        assert stats.median([]) == 0.0

    def test_median_abs(self):
        assert stats.median_abs([-3.0, 1.0, -2.0]) == 2.0


class TestQuantile:

    @pytest.mark.parametrize("values", [
        [5.0],
        [3.0, 1.0, 2.0],
        [10.0, -4.0, 7.5, 7.5, 0.0],
        make_prices(n=37, seed=7),
    ])
    def test_extremes_are_min_and_max(self, values):
        assert stats.quantile(values, 0.0) == min(values)
        assert stats.quantile(values, 1.0) == max(values)

    def test_interpolation(self):
        assert stats.quantile([1, 2, 3, 4], 0.5) == pytest.approx(2.5)
        assert stats.quantile([10, 20], 0.25) == pytest.approx(12.5)

    def test_q_is_clamped(self):
        assert stats.quantile([1, 2, 3], -0.5) == 1
        assert stats.quantile([1, 2, 3], 1.5) == 3

    def test_unsorted_input(self):
        assert stats.quantile([9, 1, 5], 0.5) == 5

    def test_empty(self):
        assert stats.quantile([], 0.3) == 0.0


class TestGridProfit:

    @pytest.mark.parametrize("lower,upper,grids", [
        (100.0, 121.0, 2),
        (40000.0, 50000.0, 35),
        (0.05, 0.09, 170),
    ])
    def test_fee_free_equals_step_ratio_minus_one(self, lower, upper, grids):
        profit = stats.geometric_grid_profit_per_cycle(lower, upper, grids, 0.0)
        assert profit == pytest.approx((upper / lower) ** (1.0 / grids) - 1.0)

    def test_with_fee(self):
        profit = stats.geometric_grid_profit_per_cycle(100.0, 121.0, 2, 0.001)
        assert profit == pytest.approx(0.999 * 1.1 - 1.0 - 0.001)

    def test_fees_can_make_cycle_unprofitable(self):
        assert stats.geometric_grid_profit_per_cycle(100.0, 101.0, 50, 0.001) < 0

    @pytest.mark.parametrize("lower,upper,grids", [
        (100.0, 121.0, 0),
        (100.0, 121.0, -3),
        (0.0, 121.0, 2),
        (-5.0, 121.0, 2),
        (121.0, 121.0, 2),
        (130.0, 121.0, 2),
    ])
    def test_degenerate_inputs_return_zero(self, lower, upper, grids):
        assert stats.geometric_grid_profit_per_cycle(lower, upper, grids, 0.001) == 0.0
        assert stats.grid_step_pct(lower, upper, grids) == 0.0

    def test_grid_step_pct(self):
        assert stats.grid_step_pct(100.0, 121.0, 2) == pytest.approx(10.0)


class TestReturnVolatility:

    def test_constant_series(self):
        prices = [100.0] * 20
        assert stats.sigma_return_pct(prices) == 0.0
        assert stats.median_abs_return_pct(prices) == 0.0

    def test_scaled_to_percent(self):
        prices = [100.0, 110.0, 99.0, 108.9]
        rets = stats.log_returns(prices)
        assert stats.sigma_return_pct(prices) == pytest.approx(stats.stdev(rets) * 100)
        assert stats.median_abs_return_pct(prices) == pytest.approx(stats.median_abs(rets) * 100)


class TestNumpyReference:

    @pytest.fixture
    def walk(self):
        return make_prices(n=301, start_price=100.0, seed=11)

    @pytest.mark.parametrize("q", [0.0, 0.05, 0.2, 0.5, 0.8, 0.95, 1.0])
    def test_quantile_matches_linear_method(self, walk, q):
        assert stats.quantile(walk, q) == np.quantile(walk, q)

    def test_median_and_stdev(self, walk):
        assert stats.median(walk) == np.median(walk)
        assert stats.stdev(walk) == pytest.approx(np.std(walk, ddof=1))

    def test_log_returns(self, walk):
        assert stats.log_returns(walk) == pytest.approx(np.diff(np.log(walk)).tolist())
