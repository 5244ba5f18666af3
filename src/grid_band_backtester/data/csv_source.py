"""
CsvCandleSource — offline candles from a CSV export.

Accepts the layout written by historical-data downloaders
(timestamp, datetime, open, high, low, close, volume) as well as files
carrying explicit open_time / close_time columns.
"""

from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from grid_band_backtester.data.candles import Candle, timeframe_to_ms
from grid_band_backtester.exceptions import CandleDataError
from grid_band_backtester.logging import get_logger

logger = get_logger(__name__)

PRICE_COLUMNS = ["open", "high", "low", "close", "volume"]


class CsvCandleSource:
    """Candle source reading a single symbol's history from a CSV file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self, timeframe: str) -> pd.DataFrame:
        """Load, clean and sort the CSV into open_time/OHLCV/close_time columns."""
        try:
            df = pd.read_csv(self.path)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise CandleDataError(f"Cannot read candles from {self.path}: {e}") from e

        time_col = "open_time" if "open_time" in df.columns else "timestamp"
        missing = [c for c in [time_col, *PRICE_COLUMNS] if c not in df.columns]
        if missing:
            raise CandleDataError(f"{self.path} is missing columns: {', '.join(missing)}")

        for col in PRICE_COLUMNS:
            df[col] = pd.to_numeric(df[col], errors="coerce")

        open_time = pd.to_numeric(df[time_col], errors="coerce")
        if open_time.isna().all():
            parsed = pd.to_datetime(df[time_col], utc=True, errors="coerce")
            open_time = (parsed - pd.Timestamp(0, tz="UTC")) // pd.Timedelta(milliseconds=1)
        df["open_time"] = open_time

        if "close_time" in df.columns:
            df["close_time"] = pd.to_numeric(df["close_time"], errors="coerce")
        else:
            df["close_time"] = df["open_time"] + timeframe_to_ms(timeframe) - 1

        df = df.dropna(subset=["open_time", "close_time", *PRICE_COLUMNS])
        df = df.sort_values("open_time").drop_duplicates(subset="open_time", keep="last")
        return df[["open_time", *PRICE_COLUMNS, "close_time"]].reset_index(drop=True)

    def fetch_recent_candles(
        self,
        symbol: str,
        timeframe: str,
        limit: int,
    ) -> list[Candle]:
        if limit <= 0:
            return []

        df = self.load(timeframe).tail(limit)
        candles = [
            Candle(
                open_time=int(row.open_time),
                open=float(row.open),
                high=float(row.high),
                low=float(row.low),
                close=float(row.close),
                volume=float(row.volume),
                close_time=int(row.close_time),
            )
            for row in df.itertuples(index=False)
        ]

        logger.info(
            "Candles loaded from CSV",
            path=str(self.path),
            symbol=symbol,
            requested=limit,
            received=len(candles),
        )
        return candles


def save_candles_csv(candles: Sequence[Candle], path: Path | str) -> Path:
    """Write candles in the open_time/OHLCV/close_time layout CsvCandleSource reads back."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    columns = ["open_time", *PRICE_COLUMNS, "close_time"]
    df = pd.DataFrame([c.to_dict() for c in candles], columns=columns)
    df.to_csv(path, index=False)

    logger.info("Candles saved to CSV", path=str(path), candles=len(df))
    return path
