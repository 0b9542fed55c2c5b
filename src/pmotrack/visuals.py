"""Optional visual summaries for portfolio variance."""

from __future__ import annotations

import io
import textwrap
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

try:  # pragma: no cover - optional dependency
    import matplotlib

    matplotlib.use("Agg")  # Ensure headless operation on CI/servers.
    import matplotlib.pyplot as plt
    from matplotlib.ticker import FuncFormatter
except Exception:  # pragma: no cover - matplotlib unavailable or misconfigured
    plt = None  # type: ignore
    FuncFormatter = None  # type: ignore

from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .models import VarianceStatus
from .reporting import format_currency

STATUS_COLORS = {
    VarianceStatus.OVER_BUDGET.value: "#C44E52",
    VarianceStatus.UNDER_BUDGET.value: "#55A868",
    VarianceStatus.ON_TRACK.value: "#4C72B0",
}


@dataclass
class _ChartRecord:
    """Metadata captured for PDF bundling."""

    title: str
    caption: str
    image_bytes: bytes


def _peso_formatter() -> Optional["FuncFormatter"]:
    if FuncFormatter is None:
        return None
    return FuncFormatter(lambda x, _pos: format_currency(x))


def _write_figure(
    fig: "plt.Figure",
    base_name: str,
    output_dir: Path,
    *,
    save_png: bool,
    save_pdf: bool,
    dpi: int = 140,
) -> Tuple[List[Path], bytes]:
    output_dir.mkdir(parents=True, exist_ok=True)
    created: List[Path] = []
    buffer = io.BytesIO()
    fig.savefig(buffer, format="png", dpi=dpi, bbox_inches="tight")
    png_bytes = buffer.getvalue()
    if save_png:
        png_path = output_dir / f"{base_name}.png"
        with open(png_path, "wb") as handle:
            handle.write(png_bytes)
        created.append(png_path)
    if save_pdf:
        pdf_path = output_dir / f"{base_name}.pdf"
        fig.savefig(pdf_path, format="pdf", bbox_inches="tight")
        created.append(pdf_path)
    plt.close(fig)
    return created, png_bytes


def _bundle_pdf(entries: List[_ChartRecord], pdf_path: Path) -> None:
    c = canvas.Canvas(str(pdf_path), pagesize=landscape(letter))
    page_width, page_height = landscape(letter)
    margin = 36
    text_width = page_width - 2 * margin
    image_height = page_height - 2 * margin - 32
    for entry in entries:
        c.setFont("Helvetica-Bold", 16)
        c.drawString(margin, page_height - margin + 4, entry.title)
        image = ImageReader(io.BytesIO(entry.image_bytes))
        img_width, img_height = image.getSize()
        scale = min(text_width / img_width, image_height / img_height)
        draw_width = img_width * scale
        draw_height = img_height * scale
        x = (page_width - draw_width) / 2
        y = margin + 24
        c.drawImage(image, x, y, width=draw_width, height=draw_height, preserveAspectRatio=True, mask="auto")
        c.setFont("Helvetica", 10)
        text_y = margin
        for line in textwrap.wrap(entry.caption, width=110) or [entry.caption]:
            c.drawString(margin, text_y, line)
            text_y -= 12
        c.showPage()
    c.save()


def emit_visualizations(
    frame: pd.DataFrame,
    output_dir: str | Path,
    *,
    top_n_projects: int = 15,
    format: str = "png",
    bundle_pdf: bool = True,
) -> Dict[str, object]:
    """Emit charts summarizing a :func:`pmotrack.aggregate.variance_frame` table."""

    if plt is None:
        return {"charts": [], "pdf": None, "skipped": ["matplotlib not available"]}

    target_dir = Path(output_dir)
    target_dir.mkdir(parents=True, exist_ok=True)

    fmt = (format or "png").lower()
    save_png = fmt in {"png", "both"}
    save_pdf = fmt in {"pdf", "both"}
    if not (save_png or save_pdf):
        save_png = True

    charts: List[Path] = []
    skipped: List[str] = []
    pdf_entries: List[_ChartRecord] = []
    formatter = _peso_formatter()

    def record_chart(fig: "plt.Figure", base_name: str, title: str, caption: str) -> None:
        created, png_bytes = _write_figure(fig, base_name, target_dir, save_png=save_png, save_pdf=save_pdf)
        charts.extend(created)
        if bundle_pdf:
            pdf_entries.append(_ChartRecord(title=title, caption=caption, image_bytes=png_bytes))

    if frame.empty:
        return {"charts": [], "pdf": None, "skipped": ["no projects to chart"]}

    # Variance status distribution ---------------------------------------------------
    counts = frame["VARIANCE_STATUS"].value_counts()
    order = [status.value for status in VarianceStatus]
    values = [int(counts.get(label, 0)) for label in order]
    fig, ax = plt.subplots(figsize=(8, 5), dpi=140)
    ax.bar(order, values, color=[STATUS_COLORS[label] for label in order])
    ax.set_title("Projects by Variance Status")
    ax.set_ylabel("Projects")
    ax.grid(True, axis="y", linestyle="--", alpha=0.3)
    fig.tight_layout()
    record_chart(
        fig,
        "variance_status_distribution",
        "Variance Status Distribution",
        "Count of projects classified over budget, under budget or on track.",
    )

    # Per-project variance -------------------------------------------------------------
    ranked = frame.assign(_ABS=frame["VARIANCE"].abs()).sort_values("_ABS", ascending=False)
    ranked = ranked.head(max(1, top_n_projects))
    fig, ax = plt.subplots(figsize=(9, max(4, 0.4 * len(ranked) + 1)), dpi=140)
    labels = ranked["PROJECT_NAME"].astype(str).str.slice(0, 40)[::-1]
    ax.barh(labels, ranked["VARIANCE"][::-1], color=[STATUS_COLORS.get(s, "#8172B3") for s in ranked["VARIANCE_STATUS"][::-1]])
    ax.axvline(0, color="black", linewidth=0.8)
    ax.set_title("Largest Variances (spend minus earned value)")
    if formatter is not None:
        ax.xaxis.set_major_formatter(formatter)
    ax.grid(True, axis="x", linestyle="--", alpha=0.3)
    fig.tight_layout()
    record_chart(
        fig,
        "project_variance",
        "Project Variance",
        "Projects ranked by absolute variance; positive bars spent more than their reported progress justifies.",
    )

    # Contract versus utilized by category --------------------------------------------
    by_category = frame.groupby("CATEGORY")[["TOTAL_CONTRACT_AMOUNT", "BUDGET_UTILIZED", "EXPECTED_PROGRESS_VALUE"]].sum()
    if len(by_category) <= 1:
        skipped.append("category comparison skipped (single category)")
    else:
        positions = np.arange(len(by_category))
        width = 0.28
        fig, ax = plt.subplots(figsize=(9, 5), dpi=140)
        ax.bar(positions - width, by_category["TOTAL_CONTRACT_AMOUNT"], width, label="Contract", color="#8172B3")
        ax.bar(positions, by_category["EXPECTED_PROGRESS_VALUE"], width, label="Earned value", color="#4C72B0")
        ax.bar(positions + width, by_category["BUDGET_UTILIZED"], width, label="Utilized", color="#DD8452")
        ax.set_xticks(positions)
        ax.set_xticklabels(by_category.index, rotation=30, ha="right")
        if formatter is not None:
            ax.yaxis.set_major_formatter(formatter)
        ax.legend(frameon=False)
        ax.set_title("Contract, Earned Value and Utilization by Category")
        ax.grid(True, axis="y", linestyle="--", alpha=0.3)
        fig.tight_layout()
        record_chart(
            fig,
            "category_budget_comparison",
            "Category Budget Comparison",
            "Contract totals against the value earned by physical progress and the amount actually utilized.",
        )

    pdf_path: Optional[Path] = None
    if bundle_pdf and pdf_entries:
        pdf_path = target_dir / "Variance_Visual_Summary.pdf"
        _bundle_pdf(pdf_entries, pdf_path)

    return {
        "charts": [str(path) for path in charts],
        "pdf": str(pdf_path) if pdf_path else None,
        "skipped": skipped,
    }


__all__ = ["emit_visualizations"]
