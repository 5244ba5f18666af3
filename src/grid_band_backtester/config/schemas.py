"""
Pydantic schemas for backtest settings.
Defines the sweep parameters and their validation rules.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from grid_band_backtester.core.bands import BandType
from grid_band_backtester.data.candles import DEFAULT_TIMEFRAME, TIMEFRAME_MINUTES
from grid_band_backtester.logging import get_logger

logger = get_logger(__name__)


class BandSelection(str, Enum):
    """Which band strategies a run evaluates"""

    SIMPLE = "simple"
    ROBUST = "robust"
    BOTH = "both"

    @property
    def band_types(self) -> list[BandType]:
        if self is BandSelection.SIMPLE:
            return [BandType.SIMPLE]
        if self is BandSelection.ROBUST:
            return [BandType.ROBUST]
        return [BandType.SIMPLE, BandType.ROBUST]


class BacktestSettings(BaseModel):
    """Resolved configuration of one backtest run"""

    model_config = ConfigDict(extra="forbid")

    symbol: str = Field(
        ...,
        min_length=1,
        description="Trading pair, as a market id (BTCUSDT) or unified symbol (BTC/USDT)",
    )
    window_size_days: int = Field(default=60, gt=0, description="Days per backtest window")
    max_windows: int = Field(default=4, gt=0, description="Number of windows to evaluate")
    window_slide_days: int | None = Field(
        default=None,
        gt=0,
        description="Days between window ends (default: half the window size, rounded)",
    )
    min_number_of_grids: int = Field(default=35, gt=0, description="Smallest grid count swept")
    max_number_of_grids: int = Field(default=170, gt=0, description="Largest grid count swept")
    grid_count_step: int = Field(default=1, description="Grid count increment (at least 1)")
    fee_rate: float = Field(default=0.00075, ge=0, description="Fee per side (0.00075 = 0.075%)")
    band_type: BandSelection = Field(default=BandSelection.BOTH, description="Band strategies")
    price_timeframe: str = Field(default=DEFAULT_TIMEFRAME, description="Candle timeframe")
    exchange_id: str = Field(default="binance", description="CCXT exchange identifier")

    @field_validator("band_type", mode="before")
    @classmethod
    def normalize_band_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("grid_count_step")
    @classmethod
    def coerce_grid_count_step(cls, value: int) -> int:
        return max(value, 1)

    @field_validator("price_timeframe")
    @classmethod
    def fallback_timeframe(cls, value: str) -> str:
        if value not in TIMEFRAME_MINUTES:
            logger.warning(
                "Unknown timeframe, falling back",
                timeframe=value,
                fallback=DEFAULT_TIMEFRAME,
            )
            return DEFAULT_TIMEFRAME
        return value

    @model_validator(mode="after")
    def validate_grid_range(self) -> "BacktestSettings":
        """Ensure min_number_of_grids <= max_number_of_grids and resolve the slide"""
        if self.min_number_of_grids > self.max_number_of_grids:
            raise ValueError("min_number_of_grids must not exceed max_number_of_grids")
        if self.window_slide_days is None:
            # round half up of window_size_days / 2
            self.window_slide_days = (self.window_size_days + 1) // 2
        return self

    @property
    def band_types(self) -> list[BandType]:
        return self.band_type.band_types

    @property
    def total_days(self) -> int:
        """Days of history covering every window."""
        return self.window_size_days + (self.max_windows - 1) * self.window_slide_days

    def grid_counts(self) -> range:
        return range(self.min_number_of_grids, self.max_number_of_grids + 1, self.grid_count_step)
