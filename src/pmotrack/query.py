"""Search, status filtering and ordering for project listings."""

from __future__ import annotations

from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .models import Project, ProjectStatus
from .project_meta import parse_project_status

SORT_OPTIONS: Tuple[Tuple[str, str], ...] = (
    ("name", "Name"),
    ("contract_amount", "Budget"),
    ("progress", "Progress"),
    ("start_date", "Date"),
    ("status", "Status"),
)


def _start_ordinal(project: Project) -> int:
    if not project.start_date:
        return 0
    try:
        return date.fromisoformat(str(project.start_date)[:10]).toordinal()
    except ValueError:
        return 0


# (key, reverse)
_SORT_KEYS: Dict[str, Tuple[Callable[[Project], object], bool]] = {
    "name": (lambda p: p.name.lower(), False),
    "contract_amount": (lambda p: p.total_contract_amount, True),
    "progress": (lambda p: p.physical_accomplishment, True),
    "start_date": (_start_ordinal, True),
    "status": (lambda p: p.status.label, False),
}


def filter_projects(
    projects: Iterable[Project],
    search: str = "",
    status: Optional[object] = None,
) -> List[Project]:
    """
    Keep projects matching ``search`` and ``status``.

    ``search`` is a case-insensitive substring matched against the project
    name, contractor and location.  ``status`` may be a :class:`ProjectStatus`,
    a label such as ``"On Hold"``, or ``None``/``"all"`` to keep every status.
    """

    needle = (search or "").strip().lower()
    wanted: Optional[ProjectStatus] = None
    if status is not None and str(status).strip().lower() not in {"", "all"}:
        wanted = parse_project_status(status)
        if wanted is None:
            return []

    out: List[Project] = []
    for project in projects:
        if needle:
            haystacks = (project.name, project.contractor, project.location)
            if not any(needle in (text or "").lower() for text in haystacks):
                continue
        if wanted is not None and project.status != wanted:
            continue
        out.append(project)
    return out


def sort_projects(projects: Iterable[Project], sort_by: str = "name") -> List[Project]:
    items = list(projects)
    entry = _SORT_KEYS.get((sort_by or "").strip().lower())
    if entry is None:
        return items
    key, reverse = entry
    return sorted(items, key=key, reverse=reverse)


__all__ = ["SORT_OPTIONS", "filter_projects", "sort_projects"]
