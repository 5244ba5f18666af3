"""Candle sources — CCXT exchange client and CSV files."""

from grid_band_backtester.data.candles import (
    DEFAULT_TIMEFRAME,
    TIMEFRAME_MINUTES,
    Candle,
    CandleSource,
    candles_per_day,
    timeframe_minutes,
    timeframe_to_ms,
)
from grid_band_backtester.data.csv_source import CsvCandleSource, save_candles_csv
from grid_band_backtester.data.exchange import ExchangeCandleSource

__all__ = [
    "DEFAULT_TIMEFRAME",
    "TIMEFRAME_MINUTES",
    "Candle",
    "CandleSource",
    "candles_per_day",
    "timeframe_minutes",
    "timeframe_to_ms",
    "CsvCandleSource",
    "ExchangeCandleSource",
    "save_candles_csv",
]
