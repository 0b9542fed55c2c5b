import argparse
import logging
import os
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from .aggregate import aggregate, portfolio_stats, variance_frame
from .config import Config
from .config import load_config as load_runtime_config
from .project_io import load_store
from .query import SORT_OPTIONS, filter_projects, sort_projects
from .reporting import format_currency, make_summary_text
from .writer import write_outputs

BASE_DIR = Path(__file__).resolve().parents[2]

logger = logging.getLogger(__name__)


def run(runtime_config: Optional[Config] = None) -> int:
    """Load projects, compute variance and write the report artifacts.

    Returns 0 on success and 1 when the project register cannot be read.
    """

    cfg = runtime_config or load_runtime_config(os.environ, None)
    logger.info("[variance] tolerance=%s of contract amount", cfg.tolerance)

    try:
        store = load_store(cfg.projects_path, tolerance=cfg.tolerance)
    except FileNotFoundError:
        logger.error("Project register not found: %s", cfg.projects_path)
        return 1
    except ValueError as exc:
        logger.error("Unable to read project register %s: %s", cfg.projects_path, exc)
        return 1

    projects = store.list_by_category(cfg.category) if cfg.category else store.list_all()
    projects = sort_projects(filter_projects(projects, search=cfg.search, status=cfg.status), cfg.sort_by)
    logger.info("[variance] %d of %d projects selected", len(projects), len(store))

    for project in projects:
        result = project.variance
        logger.debug(
            "[project] %s :: expected=%s utilized=%s variance=%s (%.1f%%) => %s",
            project.id,
            format_currency(result.expected_progress_value),
            format_currency(project.budget_utilized),
            format_currency(result.variance),
            result.variance_percentage,
            result.status.value,
        )

    frame = variance_frame(projects, tolerance=cfg.tolerance)
    summary = aggregate(projects, tolerance=cfg.tolerance)
    stats = portfolio_stats(projects)
    artifacts = write_outputs(frame, summary, stats, cfg)

    if cfg.emit_charts:
        from .visuals import emit_visualizations

        visuals = emit_visualizations(frame, cfg.output_dir / "charts", format=cfg.chart_format)
        for reason in visuals.get("skipped", []):
            logger.info("[charts] %s", reason)
        if visuals.get("pdf"):
            artifacts["charts_pdf"] = Path(visuals["pdf"])

    logger.info("\n=== SUMMARY ===\n")
    logger.info("%s", make_summary_text(frame, summary, stats))
    logger.info("Outputs written:")
    for path in artifacts.values():
        logger.info(" - %s", path)
    return 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute budget variance for PMO-tracked projects")
    parser.add_argument("--projects", help="Project register (CSV or XLSX)")
    parser.add_argument("--output-dir", help="Directory for generated outputs")
    parser.add_argument(
        "--tolerance",
        type=float,
        help="On-track band as a fraction of the contract amount (default 0)",
    )
    parser.add_argument(
        "--threshold-policy",
        action="store_true",
        help="Use the 5%% of contract amount on-track band",
    )
    parser.add_argument("--category", help="Only include projects in this category")
    parser.add_argument("--status", help="Only include projects with this status")
    parser.add_argument("--search", help="Match project name, contractor or location")
    parser.add_argument("--sort-by", choices=[key for key, _label in SORT_OPTIONS], help="Listing order")
    parser.add_argument("--charts", action="store_true", help="Emit variance charts and a PDF summary")
    parser.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(BASE_DIR / ".env")
    args = parse_args(argv)
    runtime_cfg = load_runtime_config(os.environ, args)
    log_level = logging.DEBUG if runtime_cfg.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")
    try:
        return run(runtime_config=runtime_cfg)
    except Exception:  # pragma: no cover
        logger.exception("Fatal error during variance report generation")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
