"""Structured logging for the grid band backtester."""

from grid_band_backtester.logging.logger import get_logger, setup_logging, log_context

__all__ = ["get_logger", "setup_logging", "log_context"]
