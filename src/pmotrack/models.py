from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class VarianceStatus(str, Enum):
    OVER_BUDGET = "Over Budget"
    UNDER_BUDGET = "Under Budget"
    ON_TRACK = "On Track"


class ProjectStatus(str, Enum):
    PLANNING = "PLANNING"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    ON_HOLD = "ON_HOLD"
    CANCELLED = "CANCELLED"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class PowStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    FOR_APPROVAL = "For Approval"


class Role(str, Enum):
    ADMIN = "Admin"
    STAFF = "Staff"
    DIRECTOR = "Director"
    CLIENT = "Client"


class Action(str, Enum):
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    APPROVE = "approve"


@dataclass(frozen=True)
class ProjectFinancials:
    """The three figures the variance calculation depends on."""

    total_contract_amount: float
    physical_accomplishment: float
    budget_utilized: float


@dataclass(frozen=True)
class VarianceResult:
    """Spend versus reported physical progress for a single project."""

    expected_progress_value: float
    variance: float
    variance_percentage: float
    status: VarianceStatus

    @property
    def is_over_budget(self) -> bool:
        return self.variance > 0


@dataclass(frozen=True)
class ProjectSummary:
    total_variance: float = 0.0
    over_budget_count: int = 0
    under_budget_count: int = 0
    on_track_count: int = 0
    average_progress: float = 0.0

    @property
    def project_count(self) -> int:
        return self.over_budget_count + self.under_budget_count + self.on_track_count


@dataclass(frozen=True)
class Project:
    """A tracked project record as held by :class:`pmotrack.store.ProjectStore`."""

    id: str
    name: str
    category: str
    financials: ProjectFinancials
    status: ProjectStatus = ProjectStatus.PLANNING
    pow_status: PowStatus = PowStatus.PENDING
    location: str = ""
    contractor: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    description: str = ""
    material_cost: Optional[float] = None
    labor_cost: Optional[float] = None
    created_at: str = ""
    updated_at: str = ""
    created_by: str = "system"
    last_modified_by: str = "system"
    variance: Optional[VarianceResult] = None

    @property
    def total_contract_amount(self) -> float:
        return self.financials.total_contract_amount

    @property
    def physical_accomplishment(self) -> float:
        return self.financials.physical_accomplishment

    @property
    def budget_utilized(self) -> float:
        return self.financials.budget_utilized


@dataclass(frozen=True)
class BudgetItem:
    id: str
    project_id: str
    category: str
    allocated_amount: float
    utilized_amount: float
    description: str = ""


@dataclass(frozen=True)
class PortfolioStats:
    """Headline figures shown on the category and dashboard pages."""

    total_projects: int = 0
    total_budget: float = 0.0
    total_utilized: float = 0.0
    average_progress: float = 0.0
    status_breakdown: Dict[str, int] = field(default_factory=dict)
    category_breakdown: Dict[str, int] = field(default_factory=dict)
