"""Core computation — statistics, band estimators, crossing-count backtester."""

from grid_band_backtester.core.bands import (
    Band,
    BandType,
    VolatilityStats,
    estimate_band,
    robust_band,
    simple_quantile_band,
    window_vol_stats,
)
from grid_band_backtester.core.backtester import (
    BacktestResult,
    backtest_window,
    count_triggers,
)

__all__ = [
    "Band",
    "BandType",
    "VolatilityStats",
    "estimate_band",
    "robust_band",
    "simple_quantile_band",
    "window_vol_stats",
    "BacktestResult",
    "backtest_window",
    "count_triggers",
]
