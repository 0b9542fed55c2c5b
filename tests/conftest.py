from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from pmotrack.models import Project, ProjectFinancials, ProjectStatus

SAMPLE_PROJECTS = Path(__file__).resolve().parents[1] / "data_sample" / "projects.csv"


@pytest.fixture
def sample_projects_csv() -> Path:
    return SAMPLE_PROJECTS


@pytest.fixture
def project_factory() -> Callable[..., Project]:
    counter = {"n": 0}

    def _create(
        total: float,
        progress: float,
        utilized: float,
        *,
        name: str | None = None,
        category: str = "gaa-funded-projects",
        status: ProjectStatus = ProjectStatus.ONGOING,
        **extra,
    ) -> Project:
        counter["n"] += 1
        return Project(
            id=extra.pop("id", f"{category}-{counter['n']:03d}"),
            name=name or f"Project {counter['n']}",
            category=category,
            financials=ProjectFinancials(total, progress, utilized),
            status=status,
            **extra,
        )

    return _create
