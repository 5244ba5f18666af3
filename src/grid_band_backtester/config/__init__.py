"""Backtest settings — schema and loader."""

from grid_band_backtester.config.loader import load_settings, read_config_file
from grid_band_backtester.config.schemas import BacktestSettings, BandSelection

__all__ = ["BacktestSettings", "BandSelection", "load_settings", "read_config_file"]
