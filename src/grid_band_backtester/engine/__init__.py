"""Window backtesting engine — models, orchestrator, reporter."""

from grid_band_backtester.engine.models import BacktestRun, Window
from grid_band_backtester.engine.orchestrator import WindowOrchestrator, rank_results
from grid_band_backtester.engine.reporter import ReportSession, summarize, to_json

__all__ = [
    "BacktestRun",
    "Window",
    "WindowOrchestrator",
    "rank_results",
    "ReportSession",
    "summarize",
    "to_json",
]
