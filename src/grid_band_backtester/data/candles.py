"""
Candle record, candle source protocol and timeframe helpers.
"""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


TIMEFRAME_MINUTES: dict[str, int] = {
    "1m": 1,
    "5m": 5,
    "15m": 15,
    "1h": 60,
    "4h": 240,
    "1d": 1440,
}

DEFAULT_TIMEFRAME = "15m"
MINUTES_PER_DAY = 24 * 60


def timeframe_minutes(timeframe: str) -> int:
    """Minutes per candle. Raises ValueError for unsupported timeframes."""
    try:
        return TIMEFRAME_MINUTES[timeframe]
    except KeyError:
        raise ValueError(f"Unsupported timeframe: {timeframe}") from None


def timeframe_to_ms(timeframe: str) -> int:
    return timeframe_minutes(timeframe) * 60_000


def candles_per_day(timeframe: str) -> int:
    return MINUTES_PER_DAY // timeframe_minutes(timeframe)


@dataclass(frozen=True)
class Candle:
    """Single OHLCV candle; times are epoch milliseconds."""

    open_time: int
    open: float
    high: float
    low: float
    close: float
    volume: float
    close_time: int

    @classmethod
    def from_ohlcv(cls, row: list[Any], interval_ms: int) -> "Candle":
        """Build from a ccxt-style [timestamp, open, high, low, close, volume] row."""
        open_time = int(row[0])
        return cls(
            open_time=open_time,
            open=_to_float(row[1]),
            high=_to_float(row[2]),
            low=_to_float(row[3]),
            close=_to_float(row[4]),
            volume=_to_float(row[5]),
            close_time=open_time + interval_ms - 1,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "open_time": self.open_time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
            "close_time": self.close_time,
        }


def _to_float(value: Any) -> float:
    if value is None:
        return 0.0
    return float(value)


@runtime_checkable
class CandleSource(Protocol):
    """Supplies historical candles, ascending by open time."""

    def fetch_recent_candles(
        self,
        symbol: str,
        timeframe: str,
        limit: int,
    ) -> list[Candle]:
        """Return up to `limit` of the most recent candles (fewer early in a listing's history)."""
        ...
