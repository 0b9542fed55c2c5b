from pathlib import Path

import pytest

matplotlib = pytest.importorskip("matplotlib")
matplotlib.use("Agg")  # type: ignore[attr-defined]

from pmotrack.aggregate import variance_frame
from pmotrack.project_io import load_projects
from pmotrack.visuals import emit_visualizations


def test_emit_visualizations_creates_charts(tmp_path, sample_projects_csv):
    frame = variance_frame(load_projects(sample_projects_csv))
    output_dir = (tmp_path / "charts").resolve()

    result = emit_visualizations(frame, output_dir, top_n_projects=5, format="png", bundle_pdf=True)

    chart_names = {Path(path).name for path in result["charts"]}
    assert chart_names == {
        "variance_status_distribution.png",
        "project_variance.png",
        "category_budget_comparison.png",
    }
    for chart_path in result["charts"]:
        assert Path(chart_path).parent == output_dir
        assert Path(chart_path).exists()
    assert result["pdf"] is not None
    assert Path(result["pdf"]).name == "Variance_Visual_Summary.pdf"
    assert Path(result["pdf"]).exists()


def test_single_category_skips_comparison(tmp_path, project_factory):
    frame = variance_frame([project_factory(1_000_000, 50, 600_000), project_factory(500_000, 20, 50_000)])

    result = emit_visualizations(frame, tmp_path, format="pdf", bundle_pdf=False)

    assert {Path(path).suffix for path in result["charts"]} == {".pdf"}
    assert any("single category" in reason for reason in result["skipped"])
    assert result["pdf"] is None


def test_empty_frame_produces_nothing(tmp_path):
    result = emit_visualizations(variance_frame([]), tmp_path)
    assert result["charts"] == []
    assert result["skipped"]
