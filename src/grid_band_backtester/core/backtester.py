"""
Grid backtester — crossing-count simulation of a geometric grid.

Prices are mapped to discrete grid indexes; every unit of index movement
between consecutive prices is one trigger, and two triggers approximate one
matching buy/sell pair. Returns are derived from the closed-form per-cycle
profit of the geometric grid.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from grid_band_backtester.core import stats
from grid_band_backtester.core.bands import VolatilityStats


@dataclass(frozen=True)
class BacktestResult:
    """Outcome of one (window, band, grid count) combination."""

    number_of_grids: int
    grid_step_pct: float
    number_of_matching_pairs: int
    theoretical_net_return_per_cycle_pct: float
    realized_avg_net_return_per_cycle_pct: float
    total_net_return_pct: float
    theoretical_net_return_per_day_pct: float
    # None when sigma is not positive: the ratio is undefined, not zero.
    step_to_sigma_ratio: float | None
    sigma_pct: float
    median_abs_pct: float
    is_best_by_total: bool = False
    is_best_by_pairs: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "number_of_grids": self.number_of_grids,
            "grid_step_pct": self.grid_step_pct,
            "number_of_matching_pairs": self.number_of_matching_pairs,
            "theoretical_net_return_per_cycle_pct": self.theoretical_net_return_per_cycle_pct,
            "realized_avg_net_return_per_cycle_pct": self.realized_avg_net_return_per_cycle_pct,
            "total_net_return_pct": self.total_net_return_pct,
            "theoretical_net_return_per_day_pct": self.theoretical_net_return_per_day_pct,
            "step_to_sigma_ratio": self.step_to_sigma_ratio,
            "sigma_pct": self.sigma_pct,
            "median_abs_pct": self.median_abs_pct,
            "is_best_by_total": self.is_best_by_total,
            "is_best_by_pairs": self.is_best_by_pairs,
        }


def count_triggers(
    prices: Sequence[float],
    lower: float,
    upper: float,
    grids: int,
) -> int:
    """
    Count grid-line crossings over a price series.

    index(p) = floor(ln(clamp(p, lower, upper) / lower) / ln(step_ratio)),
    clamped to [0, grids]. A move of three levels in one step counts three.

    The floor is taken in floating point, so a price exactly at upper can land
    on index grids - 1 (e.g. grids=162 over [100, 200]); a full-band move then
    counts one trigger fewer than the grid count.
    """
    if grids <= 0 or lower <= 0.0 or upper <= lower:
        return 0
    if len(prices) < 2:
        return 0

    step_log = math.log(stats.grid_step_ratio(lower, upper, grids))
    if step_log <= 0.0:
        return 0

    def index_of(price: float) -> int:
        clamped = min(max(float(price), lower), upper)
        idx = math.floor(math.log(clamped / lower) / step_log)
        return min(max(idx, 0), grids)

    triggers = 0
    prev_idx = index_of(prices[0])
    for price in prices[1:]:
        idx = index_of(price)
        triggers += abs(idx - prev_idx)
        prev_idx = idx
    return triggers


def backtest_window(
    lower: float,
    upper: float,
    number_of_grids: int,
    fee_rate: float,
    prices: Sequence[float],
    window_days: float,
    vol_stats: VolatilityStats,
) -> BacktestResult | None:
    """Backtest one grid density over a window; None for degenerate inputs."""
    values = [float(p) for p in prices]
    if len(values) < 2:
        return None
    if lower <= 0.0 or upper <= lower:
        return None
    if number_of_grids <= 0:
        return None

    grid_step_pct = stats.grid_step_pct(lower, upper, number_of_grids)

    triggers = count_triggers(values, lower, upper, number_of_grids)
    matching_pairs = triggers // 2

    net_per_cycle_pct = stats.geometric_grid_profit_per_cycle(
        lower, upper, number_of_grids, fee_rate
    ) * 100.0

    total_net_return_pct = matching_pairs * net_per_cycle_pct
    realized_avg = total_net_return_pct / matching_pairs if matching_pairs > 0 else 0.0
    per_day = total_net_return_pct / window_days if window_days > 0 else 0.0

    sigma = vol_stats.sigma_pct
    step_to_sigma = grid_step_pct / sigma if sigma > 0.0 else None

    return BacktestResult(
        number_of_grids=number_of_grids,
        grid_step_pct=grid_step_pct,
        number_of_matching_pairs=matching_pairs,
        theoretical_net_return_per_cycle_pct=net_per_cycle_pct,
        realized_avg_net_return_per_cycle_pct=realized_avg,
        total_net_return_pct=total_net_return_pct,
        theoretical_net_return_per_day_pct=per_day,
        step_to_sigma_ratio=step_to_sigma,
        sigma_pct=sigma,
        median_abs_pct=vol_stats.median_abs_pct,
    )
