"""Tests for CsvCandleSource."""

import pytest

from grid_band_backtester.data.candles import Candle, CandleSource, candles_per_day, timeframe_to_ms
from grid_band_backtester.data.csv_source import CsvCandleSource, save_candles_csv
from grid_band_backtester.exceptions import CandleDataError
from tests.conftest import START_MS

HOUR_MS = timeframe_to_ms("1h")


def write_csv(path, header: str, rows: list[str]):
    path.write_text("\n".join([header, *rows]) + "\n")
    return path


class TestTimeframes:

    @pytest.mark.parametrize("timeframe,cpd", [
        ("1m", 1440), ("5m", 288), ("15m", 96), ("1h", 24), ("4h", 6), ("1d", 1),
    ])
    def test_candles_per_day(self, timeframe, cpd):
        assert candles_per_day(timeframe) == cpd

    def test_unsupported(self):
        with pytest.raises(ValueError):
            timeframe_to_ms("2h")

    def test_from_ohlcv(self):
        candle = Candle.from_ohlcv([START_MS, "1", 2, 0.5, 1.5, None], HOUR_MS)
        assert candle.open == 1.0
        assert candle.volume == 0.0
        assert candle.close_time == START_MS + HOUR_MS - 1


class TestCsvCandleSource:

    def test_is_candle_source(self, tmp_path):
        assert isinstance(CsvCandleSource(tmp_path / "x.csv"), CandleSource)

    def test_downloader_layout(self, tmp_path):
        path = write_csv(tmp_path / "btc.csv", "timestamp,datetime,open,high,low,close,volume", [
            f"{START_MS + i * HOUR_MS},2025-01-01,{100 + i},{101 + i},{99 + i},{100.5 + i},5"
            for i in range(5)
        ])

        candles = CsvCandleSource(path).fetch_recent_candles("BTCUSDT", "1h", 10)

        assert len(candles) == 5
        assert candles[0].open_time == START_MS
        assert candles[0].close_time == START_MS + HOUR_MS - 1
        assert candles[-1].close == 104.5

    def test_tail_limit(self, tmp_path):
        path = write_csv(tmp_path / "btc.csv", "timestamp,open,high,low,close,volume", [
            f"{START_MS + i * HOUR_MS},1,1,1,{i + 1},1" for i in range(10)
        ])

        candles = CsvCandleSource(path).fetch_recent_candles("BTCUSDT", "1h", 3)

        assert [c.close for c in candles] == [8.0, 9.0, 10.0]

    def test_explicit_close_time(self, tmp_path):
        path = write_csv(tmp_path / "btc.csv", "open_time,open,high,low,close,volume,close_time", [
            f"{START_MS},1,2,0.5,1.5,3,{START_MS + 999}",
        ])

        (candle,) = CsvCandleSource(path).fetch_recent_candles("BTCUSDT", "1h", 1)

        assert candle.close_time == START_MS + 999

    def test_iso_timestamps(self, tmp_path):
        path = write_csv(tmp_path / "btc.csv", "timestamp,open,high,low,close,volume", [
            "2025-01-01T01:00:00Z,1,1,1,2,1",
            "2025-01-01T00:00:00Z,1,1,1,1,1",
        ])

        candles = CsvCandleSource(path).fetch_recent_candles("BTCUSDT", "1h", 5)

        assert [c.open_time for c in candles] == [START_MS, START_MS + HOUR_MS]

    def test_sorted_deduplicated_and_cleaned(self, tmp_path):
        path = write_csv(tmp_path / "btc.csv", "timestamp,open,high,low,close,volume", [
            f"{START_MS + 2 * HOUR_MS},1,1,1,3,1",
            f"{START_MS},1,1,1,1,1",
            f"{START_MS + HOUR_MS},1,1,1,abc,1",
            f"{START_MS + 2 * HOUR_MS},1,1,1,4,1",
        ])

        candles = CsvCandleSource(path).fetch_recent_candles("BTCUSDT", "1h", 10)

        assert [c.open_time for c in candles] == [START_MS, START_MS + 2 * HOUR_MS]
        assert candles[-1].close == 4.0

    def test_missing_columns(self, tmp_path):
        path = write_csv(tmp_path / "btc.csv", "timestamp,close", [f"{START_MS},1"])
        with pytest.raises(CandleDataError, match="missing columns"):
            CsvCandleSource(path).fetch_recent_candles("BTCUSDT", "1h", 5)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CandleDataError):
            CsvCandleSource(tmp_path / "missing.csv").fetch_recent_candles("BTCUSDT", "1h", 5)

    def test_zero_limit(self, tmp_path):
        assert CsvCandleSource(tmp_path / "missing.csv").fetch_recent_candles("BTCUSDT", "1h", 0) == []


class TestSaveCandlesCsv:

    def test_written_file_reads_back(self, tmp_path):
        candles = [
            Candle(START_MS + i * HOUR_MS, 100.0 + i, 101.5 + i, 99.25 + i, 100.75 + i, 12.5, START_MS + (i + 1) * HOUR_MS - 1)
            for i in range(3)
        ]

        path = save_candles_csv(candles, tmp_path / "out" / "btc_1h.csv")

        assert path.exists()
        assert path.read_text().splitlines()[0] == "open_time,open,high,low,close,volume,close_time"
        assert CsvCandleSource(path).fetch_recent_candles("BTCUSDT", "1h", 10) == candles

    def test_empty(self, tmp_path):
        path = save_candles_csv([], tmp_path / "empty.csv")
        assert path.read_text().strip() == "open_time,open,high,low,close,volume,close_time"
