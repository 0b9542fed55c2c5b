from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from pmotrack.cli import parse_args
from pmotrack.config import load_config


def test_defaults_point_at_sample_register():
    cfg = load_config({})
    assert cfg.projects_path == cfg.base_dir / "data_sample" / "projects.csv"
    assert cfg.output_xlsx.name == "Variance_Report.xlsx"
    assert cfg.output_audit.name == "Variance_Audit.csv"
    assert cfg.run_metadata == cfg.output_dir / "run_metadata.json"
    assert cfg.tolerance == 0.0
    assert cfg.emit_charts is False
    assert cfg.sort_by == "name"


def test_environment_overrides(tmp_path: Path):
    env = {
        "PMO_PROJECTS_FILE": str(tmp_path / "register.xlsx"),
        "PMO_OUTPUT_DIR": str(tmp_path / "out"),
        "PMO_VARIANCE_POLICY": "threshold",
        "PMO_EMIT_CHARTS": "yes",
        "PMO_CHART_FORMAT": "PDF",
    }
    cfg = load_config(env)
    assert cfg.projects_path == (tmp_path / "register.xlsx").resolve()
    assert cfg.output_xlsx == (tmp_path / "out" / "Variance_Report.xlsx").resolve()
    assert cfg.tolerance == pytest.approx(0.05)
    assert cfg.emit_charts is True
    assert cfg.chart_format == "pdf"


def test_explicit_tolerance_beats_policy():
    cfg = load_config({"PMO_VARIANCE_POLICY": "threshold", "PMO_VARIANCE_TOLERANCE": "0.02"})
    assert cfg.tolerance == pytest.approx(0.02)
    assert load_config({"PMO_VARIANCE_TOLERANCE": "5%"}).tolerance == pytest.approx(0.05)


def test_unknown_policy_and_negative_tolerance_fall_back_to_strict(caplog):
    assert load_config({"PMO_VARIANCE_POLICY": "lenient"}).tolerance == 0.0
    assert load_config({"PMO_VARIANCE_TOLERANCE": "-0.1"}).tolerance == 0.0
    assert "negative" in caplog.text.lower()


def test_cli_options_take_precedence(tmp_path: Path):
    args = parse_args(
        [
            "--projects",
            str(tmp_path / "p.csv"),
            "--output-dir",
            str(tmp_path / "o"),
            "--threshold-policy",
            "--category",
            "major-repairs",
            "--status",
            "Ongoing",
            "--search",
            "hvac",
            "--sort-by",
            "progress",
            "--charts",
            "-v",
        ]
    )
    cfg = load_config({"PMO_VARIANCE_TOLERANCE": "0.2", "PMO_PROJECTS_FILE": "elsewhere.csv"}, args)
    assert cfg.projects_path == (tmp_path / "p.csv").resolve()
    assert cfg.output_dir == (tmp_path / "o").resolve()
    assert cfg.tolerance == pytest.approx(0.05)
    assert (cfg.category, cfg.status, cfg.search, cfg.sort_by) == ("major-repairs", "Ongoing", "hvac", "progress")
    assert cfg.emit_charts is True
    assert cfg.verbose is True


def test_cli_tolerance_beats_threshold_flag():
    cfg = load_config({}, SimpleNamespace(threshold_policy=True, tolerance=0.1))
    assert cfg.tolerance == pytest.approx(0.1)
    cfg = load_config({}, SimpleNamespace(tolerance=0.0))
    assert cfg.tolerance == 0.0


def test_non_finite_tolerance_is_ignored(caplog):
    cfg = load_config({"PMO_VARIANCE_TOLERANCE": "nan", "PMO_VARIANCE_POLICY": "threshold"})
    assert cfg.tolerance == pytest.approx(0.05)
    assert load_config({"PMO_VARIANCE_TOLERANCE": "inf"}).tolerance == 0.0
    assert load_config({}, SimpleNamespace(tolerance=float("nan"))).tolerance == 0.0
    assert "non-finite" in caplog.text
