"""
Report rendering for backtest runs.

Generates:
- Fixed-width console tables per (band type, window)
- Best-result summaries per window
- JSON documents of a full run
"""

import json
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from grid_band_backtester.core.backtester import BacktestResult
from grid_band_backtester.engine.models import BacktestRun, Window
from grid_band_backtester.logging import get_logger

logger = get_logger(__name__)


# (result field, short column code, description)
COLUMN_DEFS: list[tuple[str, str, str]] = [
    ("number_of_grids", "grid", "number of grids"),
    ("grid_step_pct", "gstep", "grid step % (geometric)"),
    ("number_of_matching_pairs", "pairs", "matching pairs"),
    ("theoretical_net_return_per_cycle_pct", "th_cyc", "theoretical net return per cycle %"),
    ("realized_avg_net_return_per_cycle_pct", "rl_cyc", "realized avg net return per cycle %"),
    ("total_net_return_pct", "tot%", "total net return %"),
    ("theoretical_net_return_per_day_pct", "th_day", "theoretical net return per day %"),
    ("step_to_sigma_ratio", "stpσ", "grid step / sigma ratio"),
    ("is_best_by_total", "b_tot", "best by total return"),
    ("is_best_by_pairs", "b_prs", "best by matching pairs"),
]

FLAG_FIELDS = {"is_best_by_total", "is_best_by_pairs"}
UNDEFINED = "n/a"
MIN_COLUMN_WIDTH = 8


def fmt(value: Any) -> str:
    """Format a table cell; non-negative floats get a sign-aligned leading space."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "★" if value else ""
    if isinstance(value, float):
        pattern = "%.2f" if abs(value) >= 1000 else "%.4f"
        text = pattern % value
        return text if value < 0 else " " + text
    return str(value)


def format_time(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


class ReportSession:
    """Console report sink; prints the column legend once per session."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout
        self.legend_printed = False
        self._widths = [max(len(short), MIN_COLUMN_WIDTH) + 2 for _, short, _ in COLUMN_DEFS]

    def _emit(self, line: str = "") -> None:
        self.stream.write(line + "\n")

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self, run: BacktestRun) -> None:
        """Render a full run: header, legend, then one section per window."""
        self.render_header(run)

        if run.is_empty:
            self._emit("Insufficient data: no window produced a usable band for backtesting.")
            return

        self.render_legend()
        for window in run.windows:
            self.render_window(window)

        logger.debug("Report rendered", symbol=run.symbol, windows=len(run.windows))

    def render_header(self, run: BacktestRun) -> None:
        s = run.settings
        self._emit(f"Symbol: {run.symbol}")
        self._emit(
            f"window_size_days={s.window_size_days}, max_windows={s.max_windows}, "
            f"window_slide_days={s.window_slide_days}"
        )
        self._emit(
            f"min_number_of_grids={s.min_number_of_grids}, "
            f"max_number_of_grids={s.max_number_of_grids}, "
            f"grid_count_step={s.grid_count_step}"
        )
        self._emit(
            f"fee_rate={s.fee_rate}, band_type={s.band_type.value}, "
            f"price_timeframe={s.price_timeframe}"
        )
        self._emit()

    def render_legend(self) -> None:
        if self.legend_printed:
            return
        self._emit("Legend:")
        for _, short, description in COLUMN_DEFS:
            self._emit(f" {short.ljust(MIN_COLUMN_WIDTH)}: {description}")
        self._emit(f" {UNDEFINED.ljust(MIN_COLUMN_WIDTH)}: undefined (sigma is zero)")
        self._emit()
        self.legend_printed = True

    def render_window(self, window: Window) -> None:
        self._emit()
        self._emit(f"=== Window {window.index} | band_type={window.band_type.label} ===")
        self._emit(
            f" period: {format_time(window.start_time)} -> {format_time(window.end_time)} UTC"
        )

        band = window.band
        vol = window.vol_stats
        if band is None:
            self._emit(" band: (no band available for this window)")
        else:
            self._emit(
                f" band: lower={fmt(band.lower)}, upper={fmt(band.upper)}, "
                f"width_pct={fmt(band.width_pct)}, "
                f"sigma_return_pct={fmt(vol.sigma_pct)}, "
                f"median_abs_return_pct={fmt(vol.median_abs_pct)}"
            )

        if not window.results:
            self._emit(" (no backtest results for this window)")
            return

        header = "".join(
            short.center(self._widths[i]) for i, (_, short, _) in enumerate(COLUMN_DEFS)
        )
        self._emit(header)
        self._emit("-" * len(header))
        for result in window.results:
            self._emit(self.format_row(result))

    def format_row(self, result: BacktestResult) -> str:
        cells = []
        for i, (key, _, _) in enumerate(COLUMN_DEFS):
            value = getattr(result, key)
            if key == "step_to_sigma_ratio" and value is None:
                text = UNDEFINED
            else:
                text = fmt(value)
            cells.append(text.rjust(self._widths[i] - 1) + " ")
        return "".join(cells)


# =============================================================================
# Structured output
# =============================================================================


def summarize(run: BacktestRun) -> dict[str, Any]:
    """Best results per window, keyed by band type."""
    summary: dict[str, Any] = {"symbol": run.symbol, "windows": len(run.windows), "best": []}
    for window in run.windows:
        best_total = window.best_by_total
        best_pairs = window.best_by_pairs
        summary["best"].append({
            "window_index": window.index,
            "band_type": window.band_type.value,
            "best_by_total_grids": best_total.number_of_grids if best_total else None,
            "best_total_net_return_pct": best_total.total_net_return_pct if best_total else None,
            "best_by_pairs_grids": best_pairs.number_of_grids if best_pairs else None,
            "best_matching_pairs": best_pairs.number_of_matching_pairs if best_pairs else None,
        })
    return summary


def to_json(run: BacktestRun, indent: int = 2) -> str:
    """JSON document of a run with its per-window summary."""
    document = run.to_dict()
    document["summary"] = summarize(run)
    return json.dumps(document, indent=indent, ensure_ascii=False)
