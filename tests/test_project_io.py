from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
import pytest

from pmotrack.aggregate import aggregate
from pmotrack.models import PowStatus, ProjectStatus
from pmotrack.project_io import load_projects, load_store, normalize_project_frame, projects_to_frame
from pmotrack.store import ProjectStore


def test_load_sample_register(sample_projects_csv):
    projects = load_projects(sample_projects_csv)
    assert len(projects) == 10
    first = projects[0]
    assert first.id == "const-001"
    assert first.category == "gaa-funded-projects"
    assert first.total_contract_amount == 25_000_000
    assert first.physical_accomplishment == pytest.approx(83.1)
    assert first.status is ProjectStatus.ONGOING
    assert first.pow_status is PowStatus.APPROVED
    assert first.material_cost == 15_000_000
    planned = projects[-1]
    assert planned.status is ProjectStatus.PLANNING
    assert planned.pow_status is PowStatus.FOR_APPROVAL
    assert planned.end_date is None
    assert planned.material_cost is None


def test_currency_strings_are_coerced(tmp_path: Path):
    path = tmp_path / "register.csv"
    path.write_text(
        "Project Name,Contract Amount,Progress %,Amount Utilized,Category\n"
        '"Library Outlets","₱135,000",94.2%,"PHP 118,000",Minor Repairs\n',
        encoding="utf-8",
    )
    [project] = load_projects(path)
    assert project.total_contract_amount == 135_000
    assert project.physical_accomplishment == pytest.approx(94.2)
    assert project.budget_utilized == 118_000
    assert project.category == "minor-repairs"
    assert project.id == "minor-repairs-001"


def test_excel_register_with_alternate_headers(tmp_path: Path):
    path = tmp_path / "register.xlsx"
    pd.DataFrame(
        {
            "title": ["Research Greenhouse", "Extension Van"],
            "Budget": [3_200_000, 900_000],
            "physical_accomplishment": [68.4, 10],
            "Disbursed": [2_350_000, 90_000],
            "project status": ["in progress", "ON_HOLD"],
        }
    ).to_excel(path, index=False)
    store = load_store(path, tolerance=0.05)
    assert len(store) == 2
    projects = store.list_all()
    assert [p.status for p in projects] == [ProjectStatus.ONGOING, ProjectStatus.ON_HOLD]
    assert all(p.variance is not None for p in projects)
    assert store.tolerance == 0.05


def test_missing_required_columns(tmp_path: Path):
    path = tmp_path / "register.csv"
    path.write_text("Project Name,Budget\nGym,100\n", encoding="utf-8")
    with pytest.raises(ValueError, match="PHYSICAL_ACCOMPLISHMENT"):
        load_projects(path)


def test_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_projects(tmp_path / "absent.csv")


def test_unsupported_extension(tmp_path: Path):
    path = tmp_path / "register.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported"):
        load_projects(path)


def test_out_of_range_progress_is_kept_with_warning(caplog):
    raw = pd.DataFrame(
        {
            "Project Name": ["Overreported"],
            "Total Contract Amount": [1_000_000],
            "Physical Accomplishment": [120],
            "Budget Utilized": [900_000],
        }
    )
    with caplog.at_level(logging.WARNING):
        df = normalize_project_frame(raw)
    assert df.loc[0, "PHYSICAL_ACCOMPLISHMENT"] == 120
    assert "Overreported" in caplog.text


def test_projects_to_frame_reloads(tmp_path: Path, sample_projects_csv):
    projects = load_projects(sample_projects_csv)
    out = tmp_path / "export.csv"
    projects_to_frame(projects).to_csv(out, index=False)
    reloaded = load_projects(out)
    assert [p.id for p in reloaded] == [p.id for p in projects]
    assert [p.status for p in reloaded] == [p.status for p in projects]
    assert [p.budget_utilized for p in reloaded] == [p.budget_utilized for p in projects]


def test_generated_ids_skip_ids_written_in_the_table():
    frame = pd.DataFrame(
        {
            "Project ID": [None, "major-repairs-001"],
            "Project Name": ["Roof", "Gym"],
            "Category": ["major-repairs", "major-repairs"],
            "Total Contract Amount": [1_000_000, 2_000_000],
            "Physical Accomplishment": [50, 50],
            "Budget Utilized": [600_000, 1_000_000],
        }
    )
    store = ProjectStore.from_frame(frame)
    assert sorted(p.name for p in store.list_all()) == ["Gym", "Roof"]
    assert store.get("major-repairs-001").name == "Gym"
    assert store.get("major-repairs-002").name == "Roof"
    assert aggregate(store.list_all()).project_count == 2


def test_repeated_ids_are_rejected(tmp_path: Path):
    path = tmp_path / "register.csv"
    path.write_text(
        "Project ID,Project Name,Total Contract Amount,Physical Accomplishment,Budget Utilized\n"
        "p-1,Gym,100,50,50\n"
        "p-1,Roof,200,50,100\n",
        encoding="utf-8",
    )
    with pytest.raises(ValueError, match="p-1"):
        load_projects(path)
