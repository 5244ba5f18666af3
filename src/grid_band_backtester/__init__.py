"""
Grid Band Backtester — windowed evaluation of geometric grid densities.

Provides:
- Price band estimation (simple quantile and robust outlier-trimmed)
- Crossing-count grid backtests with fee-adjusted per-cycle returns
- Sliding-window sweeps over grid counts with best-result ranking
- CCXT and CSV candle sources
- Console and JSON reports
"""

__version__ = "1.0.0"
