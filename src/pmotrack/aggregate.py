"""Portfolio-level roll-ups of per-project variance."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Union

import numpy as np
import pandas as pd

from .models import (
    PortfolioStats,
    Project,
    ProjectFinancials,
    ProjectSummary,
    VarianceStatus,
)
from .project_meta import category_group
from .variance import STRICT_TOLERANCE, variance_for

FinancialsLike = Union[ProjectFinancials, Project]

VARIANCE_COLUMNS = [
    "PROJECT_ID",
    "PROJECT_NAME",
    "CATEGORY",
    "CATEGORY_GROUP",
    "STATUS",
    "TOTAL_CONTRACT_AMOUNT",
    "PHYSICAL_ACCOMPLISHMENT",
    "BUDGET_UTILIZED",
    "EXPECTED_PROGRESS_VALUE",
    "VARIANCE",
    "VARIANCE_PCT",
    "VARIANCE_STATUS",
]


def _financials(item: FinancialsLike) -> ProjectFinancials:
    if isinstance(item, ProjectFinancials):
        return item
    return item.financials


def aggregate(projects: Iterable[FinancialsLike], tolerance: float = STRICT_TOLERANCE) -> ProjectSummary:
    """
    Fold per-project variance into portfolio totals.

    Each project is classified with the same ``tolerance`` that
    :func:`pmotrack.variance.compute_variance` accepts.  An empty collection
    yields a zeroed summary.
    """

    total_variance = 0.0
    progress_sum = 0.0
    counts = Counter()
    n = 0
    for item in projects:
        fin = _financials(item)
        result = variance_for(fin, tolerance)
        total_variance += result.variance
        counts[result.status] += 1
        progress_sum += fin.physical_accomplishment
        n += 1

    return ProjectSummary(
        total_variance=total_variance,
        over_budget_count=counts[VarianceStatus.OVER_BUDGET],
        under_budget_count=counts[VarianceStatus.UNDER_BUDGET],
        on_track_count=counts[VarianceStatus.ON_TRACK],
        average_progress=progress_sum / n if n else 0.0,
    )


def portfolio_stats(projects: Iterable[Project]) -> PortfolioStats:
    """Totals and breakdowns shown on the category overview cards."""

    items: List[Project] = list(projects)
    if not items:
        return PortfolioStats()
    return PortfolioStats(
        total_projects=len(items),
        total_budget=sum(p.total_contract_amount for p in items),
        total_utilized=sum(p.budget_utilized or 0.0 for p in items),
        average_progress=sum(p.physical_accomplishment for p in items) / len(items),
        status_breakdown=dict(Counter(p.status.label for p in items)),
        category_breakdown=dict(Counter(p.category for p in items)),
    )


def variance_frame(projects: Iterable[Project], tolerance: float = STRICT_TOLERANCE) -> pd.DataFrame:
    """
    Build the per-project variance table used by reports and charts.

    The arithmetic is vectorized but mirrors
    :func:`pmotrack.variance.compute_variance` exactly.
    """

    rows = [
        {
            "PROJECT_ID": p.id,
            "PROJECT_NAME": p.name,
            "CATEGORY": p.category,
            "CATEGORY_GROUP": category_group(p.category) or "",
            "STATUS": p.status.label,
            "TOTAL_CONTRACT_AMOUNT": float(p.total_contract_amount),
            "PHYSICAL_ACCOMPLISHMENT": float(p.physical_accomplishment),
            "BUDGET_UTILIZED": float(p.budget_utilized),
        }
        for p in projects
    ]
    if not rows:
        return pd.DataFrame(columns=VARIANCE_COLUMNS)

    df = pd.DataFrame(rows)
    total = df["TOTAL_CONTRACT_AMOUNT"]
    expected = total * (df["PHYSICAL_ACCOMPLISHMENT"] / 100)
    variance = df["BUDGET_UTILIZED"] - expected
    with np.errstate(divide="ignore", invalid="ignore"):
        pct = np.where(expected > 0, (variance / expected.where(expected > 0, 1.0)) * 100, 0.0)
    band = tolerance * total
    status = np.select(
        [variance > band, variance < -band],
        [VarianceStatus.OVER_BUDGET.value, VarianceStatus.UNDER_BUDGET.value],
        default=VarianceStatus.ON_TRACK.value,
    )
    df["EXPECTED_PROGRESS_VALUE"] = expected
    df["VARIANCE"] = variance
    df["VARIANCE_PCT"] = pct
    df["VARIANCE_STATUS"] = status
    return df[VARIANCE_COLUMNS]


__all__ = ["VARIANCE_COLUMNS", "aggregate", "portfolio_stats", "variance_frame"]
