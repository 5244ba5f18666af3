"""Shared test fixtures and helpers for grid band backtester tests."""

import numpy as np
import pytest

from grid_band_backtester.data.candles import Candle, timeframe_to_ms
from grid_band_backtester.exceptions import CandleSourceError

START_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z


def make_prices(
    n: int = 200,
    start_price: float = 45000.0,
    volatility: float = 0.01,
    seed: int = 42,
) -> list[float]:
    """Generate a synthetic random-walk close series."""
    rng = np.random.RandomState(seed)
    prices = [start_price]
    for _ in range(n - 1):
        change = rng.normal(0, volatility)
        prices.append(prices[-1] * (1 + change))
    return prices


def make_ranging_prices(
    n: int = 200,
    center: float = 45000.0,
    spread: float = 800.0,
    seed: int = 42,
) -> list[float]:
    """Generate closes oscillating within a range (ideal for grids)."""
    rng = np.random.RandomState(seed)
    prices = []
    prev = center
    for _ in range(n):
        target = center + rng.uniform(-spread, spread)
        prev = prev + (target - prev) * 0.3
        prices.append(float(prev))
    return prices


def make_candles(
    closes: list[float],
    timeframe: str = "1d",
    start_ms: int = START_MS,
) -> list[Candle]:
    """Wrap closes into consecutive candles of the given timeframe."""
    interval = timeframe_to_ms(timeframe)
    candles = []
    for i, close in enumerate(closes):
        open_time = start_ms + i * interval
        candles.append(Candle(
            open_time=open_time,
            open=close,
            high=close * 1.001,
            low=close * 0.999,
            close=close,
            volume=100.0,
            close_time=open_time + interval - 1,
        ))
    return candles


class FakeCandleSource:
    """In-memory candle source recording every request."""

    def __init__(self, candles: list[Candle], error: CandleSourceError | None = None) -> None:
        self.candles = candles
        self.error = error
        self.calls: list[tuple[str, str, int]] = []

    def fetch_recent_candles(self, symbol: str, timeframe: str, limit: int) -> list[Candle]:
        self.calls.append((symbol, timeframe, limit))
        if self.error is not None:
            raise self.error
        return self.candles[-limit:] if limit > 0 else []


@pytest.fixture
def ranging_prices_200():
    return make_ranging_prices(n=200)


@pytest.fixture
def daily_candles_100():
    return make_candles(make_ranging_prices(n=100, center=100.0, spread=5.0))
