"""Budget variance against reported physical accomplishment.

Two classification policies exist in the dashboard's history: the project
table flags any non-zero variance, while the project data layer allows a band
of 5% of the contract amount before flagging.  Both are expressed here through
``tolerance``, a fraction of the total contract amount:

- ``STRICT_TOLERANCE`` (0.0, the default) flags every peso of variance.
- ``THRESHOLD_TOLERANCE`` (0.05) reproduces the 5% band.

The functions are total over numeric input.  Negative amounts and percentages
outside 0-100 are not rejected; they flow through the arithmetic unchanged.
Rounding is left to presentation code.
"""

from __future__ import annotations

from .models import ProjectFinancials, VarianceResult, VarianceStatus

STRICT_TOLERANCE = 0.0
THRESHOLD_TOLERANCE = 0.05


def classify_variance(
    variance: float,
    total_contract_amount: float,
    tolerance: float = STRICT_TOLERANCE,
) -> VarianceStatus:
    band = tolerance * total_contract_amount
    if variance > band:
        return VarianceStatus.OVER_BUDGET
    if variance < -band:
        return VarianceStatus.UNDER_BUDGET
    return VarianceStatus.ON_TRACK


def compute_variance(
    total_contract_amount: float,
    physical_accomplishment: float,
    budget_utilized: float,
    tolerance: float = STRICT_TOLERANCE,
) -> VarianceResult:
    """
    Compare spend to the value earned by reported physical progress.

    Parameters
    ----------
    total_contract_amount:
        Full contract value.
    physical_accomplishment:
        Percent complete of the physical scope of work.
    budget_utilized:
        Amount disbursed to date.
    tolerance:
        Fraction of ``total_contract_amount`` treated as on track.

    Returns
    -------
    VarianceResult
        Positive ``variance`` means more was spent than progress justifies.
        ``variance_percentage`` is 0 when nothing was expected yet.
    """

    expected = total_contract_amount * (physical_accomplishment / 100)
    variance = budget_utilized - expected
    variance_pct = (variance / expected) * 100 if expected > 0 else 0.0
    return VarianceResult(
        expected_progress_value=expected,
        variance=variance,
        variance_percentage=variance_pct,
        status=classify_variance(variance, total_contract_amount, tolerance),
    )


def variance_for(financials: ProjectFinancials, tolerance: float = STRICT_TOLERANCE) -> VarianceResult:
    return compute_variance(
        financials.total_contract_amount,
        financials.physical_accomplishment,
        financials.budget_utilized,
        tolerance=tolerance,
    )


__all__ = [
    "STRICT_TOLERANCE",
    "THRESHOLD_TOLERANCE",
    "classify_variance",
    "compute_variance",
    "variance_for",
]
