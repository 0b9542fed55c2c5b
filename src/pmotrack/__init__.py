"""Budget variance and portfolio monitoring for university PMO projects."""

from .aggregate import aggregate, portfolio_stats, variance_frame
from .models import (
    Action,
    PortfolioStats,
    Project,
    ProjectFinancials,
    ProjectStatus,
    ProjectSummary,
    Role,
    VarianceResult,
    VarianceStatus,
)
from .permissions import can
from .store import ProjectStore
from .variance import STRICT_TOLERANCE, THRESHOLD_TOLERANCE, classify_variance, compute_variance

__all__ = [
    "Action",
    "PortfolioStats",
    "Project",
    "ProjectFinancials",
    "ProjectStatus",
    "ProjectStore",
    "ProjectSummary",
    "Role",
    "STRICT_TOLERANCE",
    "THRESHOLD_TOLERANCE",
    "VarianceResult",
    "VarianceStatus",
    "aggregate",
    "can",
    "classify_variance",
    "compute_variance",
    "portfolio_stats",
    "variance_frame",
]
