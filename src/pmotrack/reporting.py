from __future__ import annotations

import math

import pandas as pd

from .models import PortfolioStats, ProjectSummary, VarianceStatus

CURRENCY_SYMBOLS = {"PHP": "₱", "USD": "$"}
_COMPACT_UNITS = ((1e12, "T"), (1e9, "B"), (1e6, "M"))


def format_currency(amount: float, currency: str = "PHP") -> str:
    """Whole-unit currency text; amounts of a million or more use compact notation."""

    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency.upper() + " ")
    if amount is None or (isinstance(amount, float) and math.isnan(amount)):
        return "-"
    sign = "-" if amount < 0 else ""
    value = abs(float(amount))
    for idx, (threshold, suffix) in enumerate(_COMPACT_UNITS):
        if value >= threshold:
            scaled = f"{value / threshold:.1f}"
            if float(scaled) >= 1000 and idx > 0:
                # 999.95M rounds up to the next unit
                threshold, suffix = _COMPACT_UNITS[idx - 1]
                scaled = f"{value / threshold:.1f}"
            return f"{sign}{symbol}{scaled.rstrip('0').rstrip('.')}{suffix}"
    return f"{sign}{symbol}{value:,.0f}"


def make_summary_text(frame: pd.DataFrame, summary: ProjectSummary, stats: PortfolioStats | None = None) -> str:
    lines = [
        f"Projects analysed: {summary.project_count}.",
        f"Net variance (spend minus earned value): {format_currency(summary.total_variance)}.",
        (
            f"Over budget: {summary.over_budget_count} | Under budget: {summary.under_budget_count}"
            f" | On track: {summary.on_track_count}."
        ),
        f"Average physical accomplishment: {summary.average_progress:.1f}%.",
    ]
    if stats is not None and stats.total_projects:
        lines.append(
            f"Contract total {format_currency(stats.total_budget)}; utilized {format_currency(stats.total_utilized)}."
        )
    if not frame.empty:
        over = frame.loc[frame["VARIANCE_STATUS"] == VarianceStatus.OVER_BUDGET.value]
        if not over.empty:
            top = over.sort_values("VARIANCE", ascending=False).head(5)[
                ["PROJECT_ID", "PROJECT_NAME", "VARIANCE", "VARIANCE_PCT"]
            ]
            lines.append(f"Largest overruns:\n{top.to_string(index=False)}")
    return "\n".join(lines) + "\n"
