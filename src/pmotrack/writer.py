"""Write variance outputs to disk."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from .config import Config
from .models import PortfolioStats, ProjectSummary

logger = logging.getLogger(__name__)


def summary_frame(summary: ProjectSummary, stats: Optional[PortfolioStats] = None) -> pd.DataFrame:
    rows = [
        ("PROJECT_COUNT", summary.project_count),
        ("TOTAL_VARIANCE", summary.total_variance),
        ("OVER_BUDGET_COUNT", summary.over_budget_count),
        ("UNDER_BUDGET_COUNT", summary.under_budget_count),
        ("ON_TRACK_COUNT", summary.on_track_count),
        ("AVERAGE_PROGRESS", summary.average_progress),
    ]
    if stats is not None:
        rows.extend(
            [
                ("TOTAL_BUDGET", stats.total_budget),
                ("TOTAL_UTILIZED", stats.total_utilized),
            ]
        )
        rows.extend((f"STATUS::{k}", v) for k, v in sorted(stats.status_breakdown.items()))
        rows.extend((f"CATEGORY::{k}", v) for k, v in sorted(stats.category_breakdown.items()))
    return pd.DataFrame(rows, columns=["METRIC", "VALUE"])


def write_outputs(
    frame: pd.DataFrame,
    summary: ProjectSummary,
    stats: Optional[PortfolioStats],
    cfg: Config,
) -> Dict[str, Path]:
    """Write the variance workbook, audit CSV and run metadata.

    Returns a dict with keys: xlsx, audit_csv, run_metadata.
    """

    cfg.output_dir.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(cfg.output_xlsx, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name="Variance", index=False)
        summary_frame(summary, stats).to_excel(writer, sheet_name="Summary", index=False)
    frame.to_csv(cfg.output_audit, index=False)

    metadata = {
        "generated_at": datetime.now().astimezone().isoformat(timespec="seconds"),
        "projects_file": str(cfg.projects_path),
        "tolerance": cfg.tolerance,
        "filters": {
            "category": cfg.category,
            "status": cfg.status,
            "search": cfg.search,
            "sort_by": cfg.sort_by,
        },
        "summary": asdict(summary),
    }
    cfg.run_metadata.write_text(json.dumps(metadata, indent=2), encoding="utf-8")
    logger.debug("Run metadata written to %s", cfg.run_metadata)

    return {
        "xlsx": cfg.output_xlsx,
        "audit_csv": cfg.output_audit,
        "run_metadata": cfg.run_metadata,
    }


__all__ = ["summary_frame", "write_outputs"]
