"""
WindowOrchestrator — Sliding-window band estimation and grid-count sweep.

Pipeline per run:
1. Fetch enough candles to cover every window
2. Slice windows newest-first, sliding backward by window_slide_days
3. Estimate each selected band type per window
4. Sweep grid counts, backtest each, rank within the (window, band) group
"""

import time
from collections.abc import Sequence
from dataclasses import replace

from grid_band_backtester.config.schemas import BacktestSettings
from grid_band_backtester.core.backtester import BacktestResult, backtest_window
from grid_band_backtester.core.bands import (
    VolatilityStats,
    estimate_band,
    window_vol_stats,
)
from grid_band_backtester.data.candles import Candle, CandleSource, candles_per_day
from grid_band_backtester.engine.models import BacktestRun, Window
from grid_band_backtester.exceptions import InsufficientDataError
from grid_band_backtester.logging import get_logger, log_context

logger = get_logger(__name__)


def _first_max_index(values: Sequence[float]) -> int:
    """Index of the largest value; the earliest index wins ties."""
    return max(range(len(values)), key=values.__getitem__)


def rank_results(results: Sequence[BacktestResult]) -> tuple[BacktestResult, ...]:
    """Flag the best result by total return and by matching pairs within a group."""
    if not results:
        return ()

    best_total = _first_max_index([r.total_net_return_pct for r in results])
    best_pairs = _first_max_index([r.number_of_matching_pairs for r in results])

    return tuple(
        replace(
            result,
            is_best_by_total=(i == best_total),
            is_best_by_pairs=(i == best_pairs),
        )
        for i, result in enumerate(results)
    )


class WindowOrchestrator:
    """Runs the window x band x grid-count sweep for one symbol."""

    MIN_WINDOW_PRICES = 10

    def __init__(self, source: CandleSource) -> None:
        self.source = source

    def run(self, settings: BacktestSettings) -> BacktestRun:
        """
        Run every window and band type configured in settings.

        Raises:
            InsufficientDataError: If the source cannot supply one full window
            CandleSourceError: If the upstream candle source fails
        """
        start = time.perf_counter()

        with log_context(symbol=settings.symbol):
            cpd = candles_per_day(settings.price_timeframe)
            needed = settings.total_days * cpd

            logger.info(
                "Requesting candles",
                timeframe=settings.price_timeframe,
                total_days=settings.total_days,
                candles=needed,
            )
            candles = self.source.fetch_recent_candles(
                settings.symbol, settings.price_timeframe, needed,
            )

            required = settings.window_size_days * cpd
            if len(candles) < required:
                logger.warning(
                    "Insufficient candle history",
                    required=required,
                    available=len(candles),
                )
                raise InsufficientDataError(settings.symbol, required, len(candles))

            windows: list[Window] = []
            for i in range(settings.max_windows):
                windows.extend(self.evaluate_window(i, candles, settings, cpd))

            windows.sort(key=lambda w: w.sort_key)

            logger.info(
                "Run complete",
                windows=len(windows),
                results=sum(len(w.results) for w in windows),
                duration_s=round(time.perf_counter() - start, 3),
            )

        return BacktestRun(
            symbol=settings.symbol,
            settings=settings,
            windows=windows,
            candles_fetched=len(candles),
            candles=list(candles),
        )

    # =========================================================================
    # Windows
    # =========================================================================

    @staticmethod
    def window_bounds(
        window_index: int,
        total_candles: int,
        settings: BacktestSettings,
        cpd: int,
    ) -> tuple[int, int] | None:
        """[start, end) candle indexes of a window, or None when it falls before the history."""
        end_idx = total_candles - window_index * settings.window_slide_days * cpd
        start_idx = end_idx - settings.window_size_days * cpd
        if start_idx < 0 or end_idx <= start_idx:
            return None
        return start_idx, end_idx

    def evaluate_window(
        self,
        window_index: int,
        candles: Sequence[Candle],
        settings: BacktestSettings,
        cpd: int,
    ) -> list[Window]:
        """Build one Window per selected band type that yields a usable band."""
        bounds = self.window_bounds(window_index, len(candles), settings, cpd)
        if bounds is None:
            logger.info("Window skipped", window=window_index, reason="before start of history")
            return []

        start_idx, end_idx = bounds
        prices = [c.close for c in candles[start_idx:end_idx]]
        if len(prices) < self.MIN_WINDOW_PRICES:
            logger.info("Window skipped", window=window_index, reason="too few prices")
            return []

        vol_stats = window_vol_stats(prices)
        windows = []

        for band_type in settings.band_types:
            band = estimate_band(band_type, prices)
            if band is None or not band.is_valid:
                logger.info(
                    "Band rejected",
                    window=window_index,
                    band_type=band_type.value,
                )
                continue

            window = Window(
                index=window_index,
                band_type=band_type,
                start_time=candles[start_idx].open_time,
                end_time=candles[end_idx - 1].close_time,
                band=band,
                vol_stats=vol_stats,
                results=self.sweep(band.lower, band.upper, prices, settings, vol_stats),
            )
            windows.append(window)

            logger.debug(
                "Sweep complete",
                window=window_index,
                band_type=band_type.value,
                results=len(window.results),
                best_total_grids=getattr(window.best_by_total, "number_of_grids", None),
                best_pairs_grids=getattr(window.best_by_pairs, "number_of_grids", None),
            )

        return windows

    # =========================================================================
    # Sweep
    # =========================================================================

    @staticmethod
    def sweep(
        lower: float,
        upper: float,
        prices: Sequence[float],
        settings: BacktestSettings,
        vol_stats: VolatilityStats,
    ) -> tuple[BacktestResult, ...]:
        """Backtest every configured grid count over one band, ranked."""
        results = []
        for grids in settings.grid_counts():
            result = backtest_window(
                lower=lower,
                upper=upper,
                number_of_grids=grids,
                fee_rate=settings.fee_rate,
                prices=prices,
                window_days=settings.window_size_days,
                vol_stats=vol_stats,
            )
            if result is not None:
                results.append(result)
        return rank_results(results)
