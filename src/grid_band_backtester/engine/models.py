"""
Window backtesting data models.

Defines the records produced by the orchestrator:
- Window: one (window slice, band strategy) pair with its ranked results
- BacktestRun: all windows of a run plus the settings that produced them
"""

from dataclasses import dataclass, field
from typing import Any

from grid_band_backtester.config.schemas import BacktestSettings
from grid_band_backtester.core.backtester import BacktestResult
from grid_band_backtester.core.bands import Band, BandType, VolatilityStats
from grid_band_backtester.data.candles import Candle


# =============================================================================
# Window
# =============================================================================


@dataclass(frozen=True)
class Window:
    """Backtest results of one window slice under one band strategy."""

    index: int
    band_type: BandType
    start_time: int
    end_time: int
    band: Band | None
    vol_stats: VolatilityStats
    results: tuple[BacktestResult, ...] = ()

    @property
    def sort_key(self) -> tuple[str, int]:
        return (self.band_type.value, self.index)

    @property
    def best_by_total(self) -> BacktestResult | None:
        return next((r for r in self.results if r.is_best_by_total), None)

    @property
    def best_by_pairs(self) -> BacktestResult | None:
        return next((r for r in self.results if r.is_best_by_pairs), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "window_index": self.index,
            "band_type": self.band_type.value,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "band": self.band.to_dict() if self.band else None,
            "vol_stats": self.vol_stats.to_dict(),
            "results": [r.to_dict() for r in self.results],
        }


# =============================================================================
# Run
# =============================================================================


@dataclass
class BacktestRun:
    """Output of a full run, windows ordered by (band_type, window index)."""

    symbol: str
    settings: BacktestSettings
    windows: list[Window] = field(default_factory=list)
    candles_fetched: int = 0
    candles: list[Candle] = field(default_factory=list, repr=False)
    candles: list[Candle] = field(default_factory=list, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.windows

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "settings": self.settings.model_dump(mode="json"),
            "candles_fetched": self.candles_fetched,
            "windows": [w.to_dict() for w in self.windows],
        }
