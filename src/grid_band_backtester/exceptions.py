"""Custom exceptions for backtest runs and candle sources"""


class GridBacktesterError(Exception):
    """Base exception for all grid band backtester errors"""

    pass


class InsufficientDataError(GridBacktesterError):
    """Raised when a run cannot form even its first window"""

    def __init__(self, symbol: str, required: int, available: int) -> None:
        self.symbol = symbol
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient data for {symbol}: need at least {required} candles, "
            f"got {available}"
        )


class ConfigurationError(GridBacktesterError):
    """Raised when settings or the configuration file are invalid"""

    pass


class CandleSourceError(GridBacktesterError):
    """Base exception for upstream candle source failures"""

    pass


class NetworkError(CandleSourceError):
    """Raised when network communication with the exchange fails"""

    pass


class RateLimitError(CandleSourceError):
    """Raised when the exchange rate limit is exceeded"""

    pass


class ExchangeNotAvailableError(CandleSourceError):
    """Raised when the exchange is not available (maintenance, etc.)"""

    pass


class SymbolNotFoundError(CandleSourceError):
    """Raised when the exchange does not list the requested symbol"""

    pass


class CandleDataError(CandleSourceError):
    """Raised when candle data is malformed or cannot be read"""

    pass
