from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Dict, Optional

from .cli import run as run_report
from .config import load_config


@dataclass
class AnalysisOptions:
    projects_file: Optional[Path] = None
    output_dir: Optional[Path] = None
    tolerance: Optional[float] = None
    threshold_policy: bool = False
    category: Optional[str] = None
    status: Optional[str] = None
    emit_charts: bool = False


def analyze(options: AnalysisOptions) -> Dict[str, Path]:
    """Programmatic interface to run the variance report and return artifact paths.

    Returns a dict with keys: xlsx, audit_csv, run_metadata.
    """
    import os

    env = dict(os.environ)
    if options.projects_file:
        env["PMO_PROJECTS_FILE"] = str(options.projects_file)
    if options.output_dir:
        env["PMO_OUTPUT_DIR"] = str(options.output_dir)

    args = SimpleNamespace(
        tolerance=options.tolerance,
        threshold_policy=options.threshold_policy,
        category=options.category,
        status=options.status,
        charts=options.emit_charts,
    )
    cfg = load_config(env, args)
    rc = run_report(runtime_config=cfg)
    if rc != 0:
        raise RuntimeError(f"Variance report failed with code {rc}")
    return {
        "xlsx": cfg.output_xlsx,
        "audit_csv": cfg.output_audit,
        "run_metadata": cfg.run_metadata,
    }
