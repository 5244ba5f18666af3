"""
Band estimators — turn a window's close prices into a grid operating range.

Two strategies share the Band result shape:
- simple: raw quantiles of the positive prices
- robust: z-score filtering of return outliers, tail trimming, then quantiles

Both return None on insufficient or degenerate data; callers skip the band
for that window instead of failing the run.
"""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np

from grid_band_backtester.core import stats


# =============================================================================
# Enums & Data Structures
# =============================================================================


class BandType(str, Enum):
    """Band estimation strategy."""

    SIMPLE = "simple"
    ROBUST = "robust"

    @property
    def label(self) -> str:
        return "simple_quantile" if self is BandType.SIMPLE else "robust_band"


@dataclass(frozen=True)
class Band:
    """Grid operating range derived from a price window."""

    lower: float
    upper: float
    center: float
    width_pct: float

    @classmethod
    def from_bounds(cls, lower: float, upper: float) -> "Band | None":
        """Build a band from two quantiles (in any order); None for an empty or non-positive range."""
        lower, upper = min(lower, upper), max(lower, upper)
        center = (lower + upper) / 2.0
        if center <= 0.0 or lower <= 0.0 or upper <= lower:
            return None
        width_pct = (upper - lower) / center * 100.0
        return cls(lower=lower, upper=upper, center=center, width_pct=width_pct)

    @property
    def is_valid(self) -> bool:
        return self.lower > 0.0 and self.upper > self.lower

    def to_dict(self) -> dict[str, Any]:
        return {
            "lower": self.lower,
            "upper": self.upper,
            "center": self.center,
            "width_pct": self.width_pct,
        }


@dataclass(frozen=True)
class VolatilityStats:
    """Per-window volatility of close-to-close log returns, in percent."""

    sigma_pct: float
    median_abs_pct: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "sigma_pct": self.sigma_pct,
            "median_abs_pct": self.median_abs_pct,
        }


# =============================================================================
# Estimators
# =============================================================================


SIMPLE_MIN_PRICES = 10
ROBUST_MIN_PRICES = 50
ROBUST_MIN_FILTERED = 30
TRIM_MIN_CORE = 10


def _positive(prices: Sequence[float]) -> list[float]:
    return [p for p in (float(x) for x in prices) if p > 0.0]


def simple_quantile_band(
    prices: Sequence[float],
    low_q: float = 0.05,
    high_q: float = 0.95,
) -> Band | None:
    """Band from plain quantiles of the positive prices (needs at least 10)."""
    positive = _positive(prices)
    if len(positive) < SIMPLE_MIN_PRICES:
        return None

    return Band.from_bounds(
        stats.quantile(positive, low_q),
        stats.quantile(positive, high_q),
    )


def robust_band(
    prices: Sequence[float],
    low_q: float = 0.20,
    high_q: float = 0.80,
    outlier_sigma: float = 3.0,
    trim_frac: float = 0.05,
) -> Band | None:
    """
    Band resistant to short-lived spikes.

    A log return r[i] (between price i and i + 1) whose z-score exceeds
    outlier_sigma removes price i + 1, the price that produced the jump.
    The survivors are sorted and floor(trim_frac * n) values are cut from
    each tail when the remaining core still holds more than 10 values.
    """
    positive = _positive(prices)
    if len(positive) < ROBUST_MIN_PRICES:
        return None

    # All prices are positive here, so r[i] pairs price i with price i + 1.
    arr = np.asarray(positive)
    returns = np.asarray(stats.log_returns(arr))
    mu = stats.mean(returns)
    sd = stats.stdev(returns)

    keep = np.ones(arr.size, dtype=bool)
    if sd > 0.0:
        keep[1:] = np.abs(returns - mu) / sd <= outlier_sigma

    filtered = np.sort(arr[keep])
    if filtered.size < ROBUST_MIN_FILTERED:
        return None

    trim = math.floor(trim_frac * filtered.size)
    if trim > 0 and filtered.size > 2 * trim + TRIM_MIN_CORE:
        core = filtered[trim:filtered.size - trim]
    else:
        core = filtered

    return Band.from_bounds(
        stats.quantile(core, low_q),
        stats.quantile(core, high_q),
    )


BAND_ESTIMATORS: dict[BandType, Callable[[Sequence[float]], Band | None]] = {
    BandType.SIMPLE: simple_quantile_band,
    BandType.ROBUST: robust_band,
}


def estimate_band(band_type: BandType, prices: Sequence[float]) -> Band | None:
    """Run the estimator selected by band_type with its default parameters."""
    return BAND_ESTIMATORS[band_type](prices)


def window_vol_stats(prices: Sequence[float]) -> VolatilityStats:
    return VolatilityStats(
        sigma_pct=stats.sigma_return_pct(prices),
        median_abs_pct=stats.median_abs_return_pct(prices),
    )
