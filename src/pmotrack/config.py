from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Mapping, Optional

from .variance import STRICT_TOLERANCE, THRESHOLD_TOLERANCE

logger = logging.getLogger(__name__)

_BOOLEAN_TRUE = {"1", "true", "yes", "on"}

VARIANCE_POLICIES = {
    "strict": STRICT_TOLERANCE,
    "threshold": THRESHOLD_TOLERANCE,
}


@dataclass(frozen=True)
class Config:
    """Runtime configuration assembled from environment variables and CLI options."""

    base_dir: Path
    projects_path: Path
    output_dir: Path
    output_xlsx: Path
    output_audit: Path
    tolerance: float = STRICT_TOLERANCE
    category: Optional[str] = None
    status: Optional[str] = None
    search: str = ""
    sort_by: str = "name"
    emit_charts: bool = False
    chart_format: str = "png"
    verbose: bool = False

    @property
    def run_metadata(self) -> Path:
        return self.output_dir / "run_metadata.json"


def _to_path(value: object | None) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value.expanduser().resolve()
    text = str(value).strip()
    if not text:
        return None
    return Path(text).expanduser().resolve()


def _to_float(value: object | None) -> Optional[float]:
    if value is None:
        return None
    text = str(value).strip()
    scale = 1.0
    if text.endswith("%"):
        # "5%" is accepted as 0.05 of the contract amount
        text, scale = text[:-1].strip(), 0.01
    if not text:
        return None
    try:
        return float(text) * scale
    except ValueError:
        return None


def _flag(value: object | None) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _BOOLEAN_TRUE


def _namespace(cli_args: object | None) -> SimpleNamespace:
    if cli_args is None:
        return SimpleNamespace()
    if isinstance(cli_args, SimpleNamespace):
        return cli_args
    if hasattr(cli_args, "__dict__"):
        return SimpleNamespace(**{k: v for k, v in vars(cli_args).items()})
    return SimpleNamespace()


def _sane_tolerance(value: Optional[float], source: str) -> Optional[float]:
    if value is None:
        return None
    if not math.isfinite(value):
        logger.warning("Ignoring non-finite variance tolerance %s from %s", value, source)
        return None
    if value < 0:
        logger.warning("Ignoring negative variance tolerance %s from %s; using 0", value, source)
        return STRICT_TOLERANCE
    return value


def load_config(env: Mapping[str, str], cli_args: object | None = None) -> Config:
    """Build a runtime :class:`Config` from environment variables and CLI options.

    Tolerance precedence: ``--tolerance``, ``--threshold-policy``,
    ``PMO_VARIANCE_TOLERANCE``, ``PMO_VARIANCE_POLICY``, then strict (0).
    """

    base_dir = Path(__file__).resolve().parents[2]
    default_projects = (base_dir / "data_sample" / "projects.csv").resolve()
    default_output_dir = (base_dir / "outputs").resolve()

    projects_path = _to_path(env.get("PMO_PROJECTS_FILE")) or default_projects
    output_dir = _to_path(env.get("PMO_OUTPUT_DIR")) or default_output_dir

    tolerance = _sane_tolerance(_to_float(env.get("PMO_VARIANCE_TOLERANCE")), "PMO_VARIANCE_TOLERANCE")
    if tolerance is None:
        policy = str(env.get("PMO_VARIANCE_POLICY", "")).strip().lower()
        if policy and policy not in VARIANCE_POLICIES:
            logger.warning("Unknown variance policy %r; using strict", policy)
        tolerance = VARIANCE_POLICIES.get(policy, STRICT_TOLERANCE)
    emit_charts = _flag(env.get("PMO_EMIT_CHARTS"))
    chart_format = str(env.get("PMO_CHART_FORMAT") or "png").strip().lower()
    category = None
    status = None
    search = ""
    sort_by = "name"
    verbose = False

    cli_ns = _namespace(cli_args)
    if getattr(cli_ns, "projects", None):
        projects_path = _to_path(cli_ns.projects) or projects_path
    if getattr(cli_ns, "output_dir", None):
        output_dir = _to_path(cli_ns.output_dir) or output_dir
    if getattr(cli_ns, "threshold_policy", False):
        tolerance = THRESHOLD_TOLERANCE
    if getattr(cli_ns, "tolerance", None) is not None:
        cli_tolerance = _sane_tolerance(float(cli_ns.tolerance), "--tolerance")
        if cli_tolerance is not None:
            tolerance = cli_tolerance
    if getattr(cli_ns, "category", None):
        category = str(cli_ns.category)
    if getattr(cli_ns, "status", None):
        status = str(cli_ns.status)
    if getattr(cli_ns, "search", None):
        search = str(cli_ns.search)
    if getattr(cli_ns, "sort_by", None):
        sort_by = str(cli_ns.sort_by)
    if getattr(cli_ns, "charts", False):
        emit_charts = True
    if getattr(cli_ns, "verbose", False):
        verbose = bool(cli_ns.verbose)

    return Config(
        base_dir=base_dir,
        projects_path=projects_path,
        output_dir=output_dir,
        output_xlsx=(output_dir / "Variance_Report.xlsx").resolve(),
        output_audit=(output_dir / "Variance_Audit.csv").resolve(),
        tolerance=tolerance,
        category=category,
        status=status,
        search=search,
        sort_by=sort_by,
        emit_charts=emit_charts,
        chart_format=chart_format,
        verbose=verbose,
    )


__all__ = ["Config", "VARIANCE_POLICIES", "load_config"]
