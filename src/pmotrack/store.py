"""In-memory project repository with variance snapshots."""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional

from .models import BudgetItem, PowStatus, Project, ProjectFinancials, ProjectStatus
from .project_meta import normalize_category, parse_amount, parse_pow_status, parse_project_status
from .variance import STRICT_TOLERANCE, variance_for

if TYPE_CHECKING:
    import pandas as pd

logger = logging.getLogger(__name__)

_FINANCIAL_FIELDS = ("total_contract_amount", "physical_accomplishment", "budget_utilized")
_PROTECTED_FIELDS = {"id", "variance", "financials", "created_at", "created_by", "updated_at", "last_modified_by"}
_PROJECT_FIELDS = frozenset(f.name for f in fields(Project))

# Field names used by the dashboard forms
_CAMEL_ALIASES = {
    "totalContractAmount": "total_contract_amount",
    "physicalAccomplishment": "physical_accomplishment",
    "budgetUtilized": "budget_utilized",
    "powStatus": "pow_status",
    "startDate": "start_date",
    "endDate": "end_date",
    "materialCost": "material_cost",
    "laborCost": "labor_cost",
}

# Default shares of the contract amount when no cost split is recorded
BUDGET_SHARES = (
    ("Materials", 0.60, "Raw materials, equipment, and supplies"),
    ("Labor", 0.25, "Skilled and unskilled labor costs"),
    ("Equipment", 0.10, "Equipment rental and specialized tools"),
    ("Administrative", 0.05, "Administrative costs and project management"),
)


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _as_float(value: Any, default: float = 0.0) -> float:
    amount = parse_amount(value)
    return default if amount is None else amount


def _canonical_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {_CAMEL_ALIASES.get(key, key): value for key, value in data.items()}


class ProjectStore:
    """
    Repository of :class:`Project` records keyed by id.

    Every stored project carries a variance snapshot computed with the store's
    ``tolerance``; the snapshot is refreshed whenever one of the three
    financial figures changes.
    """

    def __init__(self, projects: Iterable[Project] = (), tolerance: float = STRICT_TOLERANCE) -> None:
        self.tolerance = tolerance
        self._projects: Dict[str, Project] = {}
        self._budget_items: Dict[str, List[BudgetItem]] = {}
        self._counter = 0
        for project in projects:
            self._projects[project.id] = self._with_variance(project)
            self._budget_items[project.id] = []
        if self._projects:
            logger.debug("Seeded project store with %d projects", len(self._projects))

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, tolerance: float = STRICT_TOLERANCE) -> ProjectStore:
        """Seed a store from a register table with dashboard or canonical headers."""

        from .project_io import normalize_project_frame, projects_from_frame

        return cls(projects_from_frame(normalize_project_frame(frame)), tolerance=tolerance)

    def __len__(self) -> int:
        return len(self._projects)

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._projects

    def _with_variance(self, project: Project) -> Project:
        return replace(project, variance=variance_for(project.financials, self.tolerance))

    def _next_id(self, prefix: str) -> str:
        while True:
            self._counter += 1
            candidate = f"{prefix}-{self._counter:03d}"
            if candidate not in self._projects:
                return candidate

    def create(self, project_data: Mapping[str, Any], user_id: str = "system") -> Project:
        """
        Register a new project from a mapping of field values.

        Keys may use the model's names or the dashboard's camelCase names.
        ``budget_utilized`` defaults to the value earned by the reported
        accomplishment, so a project entered without spend data starts on track.
        Raises ``ValueError`` when an explicit ``id`` is already stored.
        """

        data = _canonical_keys(project_data)
        requested_id = data.get("id")
        if requested_id and str(requested_id) in self._projects:
            raise ValueError(f"Project id already exists: {requested_id}")

        category = normalize_category(data.get("category", "")) or str(data.get("category") or "uncategorized")
        total = _as_float(data.get("total_contract_amount"))
        accomplishment = _as_float(data.get("physical_accomplishment"))
        utilized = parse_amount(data.get("budget_utilized"))
        financials = ProjectFinancials(
            total_contract_amount=total,
            physical_accomplishment=accomplishment,
            budget_utilized=utilized if utilized is not None else total * accomplishment / 100,
        )
        now = _now()
        project = Project(
            id=str(requested_id or self._next_id(category)),
            name=str(data.get("name", "")),
            category=category,
            financials=financials,
            status=parse_project_status(data.get("status")) or ProjectStatus.PLANNING,
            pow_status=parse_pow_status(data.get("pow_status")) or PowStatus.PENDING,
            location=str(data.get("location", "")),
            contractor=str(data.get("contractor", "")),
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            description=str(data.get("description", "")),
            material_cost=parse_amount(data.get("material_cost")),
            labor_cost=parse_amount(data.get("labor_cost")),
            created_at=now,
            updated_at=now,
            created_by=user_id,
            last_modified_by=user_id,
        )
        project = self._with_variance(project)
        self._projects[project.id] = project
        self._budget_items[project.id] = []
        logger.info("Project created: %s (%s) by %s", project.name, project.id, user_id)
        return project

    def get(self, project_id: str) -> Optional[Project]:
        project = self._projects.get(project_id)
        if project is not None:
            logger.debug("Project retrieved: %s", project.name)
        return project

    def list_all(self) -> List[Project]:
        projects = list(self._projects.values())
        logger.debug("Retrieved %d total projects", len(projects))
        return projects

    def list_by_category(self, category: str) -> List[Project]:
        slug = normalize_category(category) or category
        projects = [p for p in self._projects.values() if p.category == slug]
        logger.debug("Retrieved %d projects for category: %s", len(projects), slug)
        return projects

    def update(self, project_id: str, changes: Mapping[str, Any], user_id: str = "system") -> Optional[Project]:
        """
        Merge ``changes`` into a stored project.

        Unknown keys are ignored, as are id, audit and snapshot fields.
        Financial values that cannot be read as amounts keep their stored value.
        """

        existing = self._projects.get(project_id)
        if existing is None:
            logger.warning("Project not found for update: %s", project_id)
            return None

        data = _canonical_keys(changes)
        ignored = sorted(k for k in data if k not in _PROJECT_FIELDS and k not in _FINANCIAL_FIELDS)
        if ignored:
            logger.debug("Ignoring unknown project fields for %s: %s", project_id, ", ".join(ignored))

        fin_changes: Dict[str, float] = {}
        for key in _FINANCIAL_FIELDS:
            if key not in data:
                continue
            amount = parse_amount(data[key])
            if amount is None:
                logger.warning("Ignoring unreadable %s %r for %s", key, data[key], project_id)
                continue
            fin_changes[key] = amount
        field_changes: Dict[str, Any] = {
            k: v for k, v in data.items() if k in _PROJECT_FIELDS and k not in _PROTECTED_FIELDS
        }
        if "status" in field_changes:
            field_changes["status"] = parse_project_status(field_changes["status"]) or existing.status
        if "pow_status" in field_changes:
            field_changes["pow_status"] = parse_pow_status(field_changes["pow_status"]) or existing.pow_status
        if "category" in field_changes:
            field_changes["category"] = normalize_category(field_changes["category"]) or existing.category
        for key in ("material_cost", "labor_cost"):
            if key in field_changes:
                field_changes[key] = parse_amount(field_changes[key])

        updated = replace(
            existing,
            **field_changes,
            financials=replace(existing.financials, **fin_changes),
            updated_at=_now(),
            last_modified_by=user_id,
        )
        if fin_changes:
            updated = self._with_variance(updated)
        self._projects[project_id] = updated
        logger.info("Project updated: %s by %s", updated.name, user_id)
        return updated

    def delete(self, project_id: str) -> bool:
        project = self._projects.pop(project_id, None)
        if project is None:
            return False
        self._budget_items.pop(project_id, None)
        logger.info("Project deleted: %s", project.name)
        return True

    def budget_items(self, project_id: str) -> List[BudgetItem]:
        return list(self._budget_items.get(project_id, []))

    def add_budget_item(
        self,
        project_id: str,
        category: str,
        allocated_amount: float,
        utilized_amount: float = 0.0,
        description: str = "",
    ) -> BudgetItem:
        if project_id not in self._projects:
            raise KeyError(f"Unknown project: {project_id}")
        items = self._budget_items.setdefault(project_id, [])
        item = BudgetItem(
            id=f"budget-{project_id}-{len(items) + 1}",
            project_id=project_id,
            category=category,
            allocated_amount=float(allocated_amount),
            utilized_amount=float(utilized_amount),
            description=description,
        )
        items.append(item)
        logger.debug("Budget item %s added to %s", item.category, project_id)
        return item

    def seed_default_budget(self, project_id: str) -> List[BudgetItem]:
        project = self._projects.get(project_id)
        if project is None:
            raise KeyError(f"Unknown project: {project_id}")
        self._budget_items[project_id] = []
        for item in default_budget_breakdown(project):
            self.add_budget_item(
                project_id,
                item.category,
                item.allocated_amount,
                item.utilized_amount,
                item.description,
            )
        return self.budget_items(project_id)


def default_budget_breakdown(project: Project) -> List[BudgetItem]:
    """
    Split the contract into the standard budget lines.

    Recorded material and labor costs replace their default shares.  Each
    line is utilized in proportion to the physical accomplishment.
    """

    overrides = {"Materials": project.material_cost, "Labor": project.labor_cost}
    ratio = project.physical_accomplishment / 100
    items: List[BudgetItem] = []
    for idx, (category, share, description) in enumerate(BUDGET_SHARES, start=1):
        allocated = overrides.get(category) or project.total_contract_amount * share
        items.append(
            BudgetItem(
                id=f"budget-{project.id}-{idx}",
                project_id=project.id,
                category=category,
                allocated_amount=allocated,
                utilized_amount=allocated * ratio,
                description=description,
            )
        )
    return items


__all__ = ["BUDGET_SHARES", "ProjectStore", "default_budget_breakdown"]
