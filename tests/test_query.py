from __future__ import annotations

import pytest

from pmotrack.models import ProjectStatus
from pmotrack.query import SORT_OPTIONS, filter_projects, sort_projects


@pytest.fixture
def projects(project_factory):
    return [
        project_factory(
            7_500_000, 72.5, 5_437_500, name="Administration Building Repair",
            contractor="Structural Solutions Ltd.", location="Admin Building", start_date="2024-04-15",
        ),
        project_factory(
            145_884, 100, 145_884, name="Kinaadman Canopy Roofing", status=ProjectStatus.COMPLETED,
            contractor="ElectroRoof Solutions", location="Kinaadman Area", start_date="2024-01-15",
        ),
        project_factory(
            1_200_000, 0, 0, name="smart classroom technology", status=ProjectStatus.PLANNING,
            contractor="Classroom Technology Inc.", location="CSU CC Campus",
        ),
    ]


def _names(items):
    return [p.name for p in items]


def test_search_matches_name_contractor_and_location(projects):
    assert _names(filter_projects(projects, search="roof")) == ["Kinaadman Canopy Roofing"]
    assert len(filter_projects(projects, search="SOLUTIONS")) == 2
    assert _names(filter_projects(projects, search="cc campus")) == ["smart classroom technology"]
    assert filter_projects(projects, search="bridge") == []


def test_status_filter_accepts_labels_and_enums(projects):
    assert _names(filter_projects(projects, status="Completed")) == ["Kinaadman Canopy Roofing"]
    assert len(filter_projects(projects, status=ProjectStatus.ONGOING)) == 1
    assert len(filter_projects(projects, status="all")) == 3
    assert filter_projects(projects, status="Archived") == []


def test_search_and_status_combine(projects):
    assert filter_projects(projects, search="solutions", status="Ongoing")[0].name == "Administration Building Repair"


def test_sort_by_name_is_case_insensitive(projects):
    assert _names(sort_projects(projects, "name")) == [
        "Administration Building Repair",
        "Kinaadman Canopy Roofing",
        "smart classroom technology",
    ]


def test_numeric_and_date_sorts_descend(projects):
    assert [p.total_contract_amount for p in sort_projects(projects, "contract_amount")] == [
        7_500_000,
        1_200_000,
        145_884,
    ]
    assert [p.physical_accomplishment for p in sort_projects(projects, "progress")] == [100, 72.5, 0]
    # undated projects sort last
    assert _names(sort_projects(projects, "start_date"))[-1] == "smart classroom technology"


def test_unknown_sort_keeps_input_order(projects):
    assert sort_projects(projects, "colour") == projects


def test_every_sort_option_is_supported(projects):
    for key, _label in SORT_OPTIONS:
        assert len(sort_projects(projects, key)) == len(projects)
