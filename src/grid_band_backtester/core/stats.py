"""
Statistical primitives for band estimation and grid profit math.

All functions are pure and degrade to 0.0 / empty results on
insufficient input instead of raising.
"""

from collections.abc import Iterable, Sequence

import numpy as np


def log_returns(prices: Sequence[float]) -> list[float]:
    """Log returns of adjacent price pairs, skipping pairs with a non-positive price."""
    arr = np.asarray(prices, dtype=float)
    if arr.size < 2:
        return []

    prev, curr = arr[:-1], arr[1:]
    valid = (prev > 0.0) & (curr > 0.0)
    return np.log(curr[valid] / prev[valid]).tolist()


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def stdev(values: Sequence[float]) -> float:
    """Sample standard deviation (divisor n - 1)."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=1))


def median(values: Iterable[float]) -> float:
    arr = np.fromiter(values, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.median(arr))


def median_abs(values: Iterable[float]) -> float:
    return median(abs(float(v)) for v in values)


def quantile(values: Iterable[float], q: float) -> float:
    """Linear-interpolation quantile; q is clamped to [0, 1]."""
    arr = np.fromiter(values, dtype=float)
    if arr.size == 0:
        return 0.0

    q = min(max(float(q), 0.0), 1.0)
    return float(np.quantile(arr, q))


def grid_step_ratio(lower: float, upper: float, grids: int) -> float:
    """Equal ratio between adjacent levels of a geometric grid."""
    return (upper / lower) ** (1.0 / grids)


def grid_step_pct(lower: float, upper: float, grids: int) -> float:
    """Geometric grid step in percent; 0.0 for degenerate bounds or grid count."""
    if grids <= 0 or lower <= 0.0 or upper <= lower:
        return 0.0
    return (grid_step_ratio(lower, upper, grids) - 1.0) * 100.0


def geometric_grid_profit_per_cycle(
    lower: float,
    upper: float,
    grids: int,
    fee_rate: float,
) -> float:
    """
    Theoretical net return of one buy-sell cycle as a fraction (0.002 = 0.2%).

    profit = (1 - fee) * r_step - 1 - fee, where r_step = (upper / lower) ^ (1 / grids).
    Returns 0.0 when grids <= 0, lower <= 0 or upper <= lower.
    """
    if grids <= 0 or lower <= 0.0 or upper <= lower:
        return 0.0
    r_step = grid_step_ratio(lower, upper, grids)
    return (1.0 - fee_rate) * r_step - 1.0 - fee_rate


def sigma_return_pct(prices: Sequence[float]) -> float:
    """Standard deviation of per-candle log returns, in percent."""
    return stdev(log_returns(prices)) * 100.0


def median_abs_return_pct(prices: Sequence[float]) -> float:
    """Median absolute per-candle log return, in percent."""
    return median_abs(log_returns(prices)) * 100.0
