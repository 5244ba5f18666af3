"""
Command-line entry point for windowed grid band backtests.

Usage:
    grid-band-backtest --symbol BTCUSDT
    grid-band-backtest --symbol ETHUSDT --band-type robust --price-timeframe 1h
    grid-band-backtest --config configs/backtest.yaml --candles-csv data/historical/binance_BTC_USDT_15m.csv
"""

import argparse
import sys
from pathlib import Path
from typing import Sequence, TextIO

from grid_band_backtester.config import BandSelection, load_settings
from grid_band_backtester.data import (
    CandleSource,
    CsvCandleSource,
    ExchangeCandleSource,
    save_candles_csv,
)
from grid_band_backtester.engine import ReportSession, WindowOrchestrator, to_json
from grid_band_backtester.exceptions import (
    CandleSourceError,
    ConfigurationError,
    InsufficientDataError,
)
from grid_band_backtester.logging import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_INSUFFICIENT_DATA = 1
EXIT_CONFIG_ERROR = 2
EXIT_SOURCE_ERROR = 3

# argparse dest -> settings field
SETTING_OPTIONS = [
    "symbol",
    "window_size_days",
    "max_windows",
    "window_slide_days",
    "min_number_of_grids",
    "max_number_of_grids",
    "grid_count_step",
    "fee_rate",
    "band_type",
    "price_timeframe",
    "exchange_id",
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grid-band-backtest",
        description="Backtest geometric grid densities over sliding price windows",
    )
    parser.add_argument("--symbol", help="Trading pair, e.g. BTCUSDT or BTC/USDT")
    parser.add_argument("--window-size-days", type=int, help="Days per window (default 60)")
    parser.add_argument("--max-windows", type=int, help="Number of windows (default 4)")
    parser.add_argument(
        "--window-slide-days", type=int,
        help="Days between windows (default: half the window size)",
    )
    parser.add_argument("--min-number-of-grids", type=int, help="Smallest grid count (default 35)")
    parser.add_argument("--max-number-of-grids", type=int, help="Largest grid count (default 170)")
    parser.add_argument("--grid-count-step", type=int, help="Grid count increment (default 1)")
    parser.add_argument("--fee-rate", type=float, help="Fee rate per side (default 0.00075)")
    parser.add_argument(
        "--band-type", type=str.lower,
        choices=[s.value for s in BandSelection],
        help="Band strategies to evaluate (default both)",
    )
    parser.add_argument("--price-timeframe", help="Candle timeframe: 1m/5m/15m/1h/4h/1d (default 15m)")
    parser.add_argument("--exchange", dest="exchange_id", help="CCXT exchange id (default binance)")
    parser.add_argument("--candles-csv", type=Path, help="Read candles from a CSV file instead of the exchange")
    parser.add_argument("--config", type=Path, help="YAML settings file; command-line options override it")
    parser.add_argument("--output", choices=["table", "json"], default="table", help="Report format")
    parser.add_argument("--save-candles", type=Path, help="Also write the fetched candles to this CSV file")
    parser.add_argument("--debug", action="store_true", help="Show debug logs")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    parser.add_argument("--log-dir", type=Path, help="Also write rotating log files to this directory")
    return parser


def build_source(args: argparse.Namespace, exchange_id: str) -> CandleSource:
    if args.candles_csv is not None:
        return CsvCandleSource(args.candles_csv)
    return ExchangeCandleSource(exchange_id=exchange_id)


def main(
    argv: Sequence[str] | None = None,
    source: CandleSource | None = None,
    stream: TextIO | None = None,
) -> int:
    """Run a backtest from command-line arguments and return the exit status."""
    args = build_parser().parse_args(argv)
    stream = stream or sys.stdout

    setup_logging(
        log_level="DEBUG" if args.debug else "INFO",
        log_dir=args.log_dir,
        log_to_console=True,
        log_to_file=args.log_dir is not None,
        json_logs=args.json_logs,
    )

    overrides = {name: getattr(args, name) for name in SETTING_OPTIONS}
    try:
        settings = load_settings(args.config, overrides)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if source is None:
        source = build_source(args, settings.exchange_id)

    try:
        run = WindowOrchestrator(source).run(settings)
    except InsufficientDataError as e:
        print(
            f"Insufficient data: symbol={e.symbol}, need at least {e.required} candles, "
            f"got {e.available}",
            file=sys.stderr,
        )
        return EXIT_INSUFFICIENT_DATA
    except CandleSourceError as e:
        logger.error("Candle source failed", symbol=settings.symbol, error=str(e))
        print(f"Candle source error: {e}", file=sys.stderr)
        return EXIT_SOURCE_ERROR

    if args.save_candles is not None:
        save_candles_csv(run.candles, args.save_candles)

    if args.output == "json":
        stream.write(to_json(run) + "\n")
    else:
        ReportSession(stream).render(run)
    return EXIT_OK


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
