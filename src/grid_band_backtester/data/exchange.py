"""
ExchangeCandleSource — historical candles from a CCXT exchange (Binance by default).

Requests above the exchange's per-call limit are paged forward from an
estimated start time and trimmed to the most recent `limit` candles.
"""

from typing import Any

import ccxt
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from grid_band_backtester.data.candles import Candle, timeframe_to_ms
from grid_band_backtester.exceptions import (
    CandleSourceError,
    ExchangeNotAvailableError,
    NetworkError,
    RateLimitError,
    SymbolNotFoundError,
)
from grid_band_backtester.logging import get_logger

logger = get_logger(__name__)


def map_ccxt_exception(e: Exception) -> CandleSourceError:
    """Map CCXT exceptions to candle source exceptions."""
    # Check more specific subclasses before their parents
    if isinstance(e, ccxt.RateLimitExceeded):
        return RateLimitError(f"Rate limit exceeded: {e}")
    elif isinstance(e, ccxt.ExchangeNotAvailable):
        return ExchangeNotAvailableError(f"Exchange not available: {e}")
    elif isinstance(e, ccxt.NetworkError):
        return NetworkError(f"Network error: {e}")
    elif isinstance(e, ccxt.BadSymbol):
        return SymbolNotFoundError(f"Unknown symbol: {e}")
    else:
        return CandleSourceError(f"Exchange API error: {e}")


class ExchangeCandleSource:
    """Candle source backed by a synchronous CCXT exchange client."""

    MAX_BATCH = 1000

    def __init__(
        self,
        exchange_id: str = "binance",
        exchange: Any | None = None,
    ) -> None:
        self.exchange_id = exchange_id
        self._exchange = exchange
        self._request_count = 0

    @property
    def exchange(self) -> Any:
        if self._exchange is None:
            exchange_class = getattr(ccxt, self.exchange_id, None)
            if exchange_class is None:
                raise CandleSourceError(f"Exchange {self.exchange_id} not supported")
            self._exchange = exchange_class({"enableRateLimit": True})
            logger.info("Exchange client created", exchange=self.exchange_id)
        return self._exchange

    @property
    def request_count(self) -> int:
        return self._request_count

    # =========================================================================
    # Requests
    # =========================================================================

    @retry(
        retry=retry_if_exception_type((NetworkError, RateLimitError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    def _load_markets(self) -> dict[str, Any]:
        try:
            return self.exchange.load_markets()
        except ccxt.BaseError as e:
            raise map_ccxt_exception(e) from e

    @retry(
        retry=retry_if_exception_type((NetworkError, RateLimitError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    def _fetch_batch(
        self,
        symbol: str,
        timeframe: str,
        since: int | None,
        limit: int,
    ) -> list[list]:
        self._request_count += 1
        try:
            return self.exchange.fetch_ohlcv(symbol, timeframe, since=since, limit=limit)
        except ccxt.BaseError as e:
            raise map_ccxt_exception(e) from e

    def resolve_symbol(self, symbol: str) -> str:
        """Map a raw market id such as BTCUSDT to the unified symbol BTC/USDT."""
        if "/" in symbol:
            return symbol

        self._load_markets()
        entry = self.exchange.markets_by_id.get(symbol)
        if isinstance(entry, list):
            spot = [m for m in entry if m.get("spot")]
            entry = (spot or entry)[0] if entry else None
        if not entry:
            raise SymbolNotFoundError(f"Symbol {symbol} not listed on {self.exchange_id}")
        return entry["symbol"]

    def fetch_recent_candles(
        self,
        symbol: str,
        timeframe: str,
        limit: int,
    ) -> list[Candle]:
        """Fetch the most recent `limit` candles, ascending by open time."""
        if limit <= 0:
            return []

        interval_ms = timeframe_to_ms(timeframe)
        market_symbol = self.resolve_symbol(symbol)

        logger.info(
            "Fetching candles",
            exchange=self.exchange_id,
            symbol=market_symbol,
            timeframe=timeframe,
            limit=limit,
        )

        if limit <= self.MAX_BATCH:
            rows = self._fetch_batch(market_symbol, timeframe, None, limit)
        else:
            rows = self._fetch_paged(market_symbol, timeframe, limit, interval_ms)

        by_open_time = {int(row[0]): row for row in rows}
        ordered = [by_open_time[t] for t in sorted(by_open_time)][-limit:]
        candles = [Candle.from_ohlcv(row, interval_ms) for row in ordered]

        logger.info(
            "Candles received",
            symbol=market_symbol,
            requested=limit,
            received=len(candles),
            requests=self._request_count,
        )
        return candles

    def _fetch_paged(
        self,
        symbol: str,
        timeframe: str,
        limit: int,
        interval_ms: int,
    ) -> list[list]:
        """Page forward from an estimated start time until `limit` rows or the present."""
        rows: list[list] = []
        since = self.exchange.milliseconds() - limit * interval_ms

        while len(rows) < limit:
            batch_limit = min(self.MAX_BATCH, limit - len(rows))
            batch = self._fetch_batch(symbol, timeframe, since, batch_limit)
            if not batch:
                break

            rows.extend(batch)
            since = int(batch[-1][0]) + interval_ms

            logger.debug(
                "Fetched candle batch",
                batch=len(batch),
                total=len(rows),
                next_since=since,
            )

            # A short batch means the present has been reached
            if len(batch) < batch_limit:
                break

        return rows
