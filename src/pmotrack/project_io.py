"""Read project registers exported from the dashboard or kept in spreadsheets."""

from __future__ import annotations

import logging
import re
from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

import pandas as pd

from .models import PowStatus, Project, ProjectFinancials, ProjectStatus
from .project_meta import AMOUNT_NOISE, normalize_category, parse_pow_status, parse_project_status
from .store import ProjectStore
from .variance import STRICT_TOLERANCE

logger = logging.getLogger(__name__)

# Canonical column -> accepted header spellings (compared case/space-insensitively)
HEADER_ALIASES: Dict[str, tuple[str, ...]] = {
    "PROJECT_ID": ("id", "project id", "project_id"),
    "PROJECT_NAME": ("project name", "projectname", "name", "title"),
    "CATEGORY": ("category", "subcategory", "project category"),
    "TOTAL_CONTRACT_AMOUNT": (
        "total contract amount",
        "totalcontractamount",
        "contract amount",
        "contract_amount",
        "budget",
    ),
    "PHYSICAL_ACCOMPLISHMENT": (
        "physical accomplishment",
        "physicalaccomplishment",
        "physical accomplishment/progress",
        "progress",
        "progress %",
    ),
    "BUDGET_UTILIZED": ("budget utilized", "budgetutilized", "budget used", "amount utilized", "disbursed"),
    "STATUS": ("status", "project status"),
    "POW_STATUS": ("pow status", "powstatus", "pow_status"),
    "LOCATION": ("location", "campus"),
    "CONTRACTOR": ("contractor",),
    "START_DATE": ("start date", "startdate", "start_date"),
    "END_DATE": ("end date", "enddate", "end_date"),
    "MATERIAL_COST": ("material cost", "materialcost", "material_cost"),
    "LABOR_COST": ("labor cost", "laborcost", "labor_cost"),
}

REQUIRED_COLUMNS = ("PROJECT_NAME", "TOTAL_CONTRACT_AMOUNT", "PHYSICAL_ACCOMPLISHMENT", "BUDGET_UTILIZED")


def _header_key(value: object) -> str:
    return re.sub(r"[\s_]+", " ", str(value).strip().lower())


def _alias_lookup() -> Dict[str, str]:
    lookup: Dict[str, str] = {}
    for canonical, aliases in HEADER_ALIASES.items():
        lookup[_header_key(canonical)] = canonical
        for alias in aliases:
            lookup[_header_key(alias)] = canonical
    return lookup


def _to_amount(series: pd.Series) -> pd.Series:
    cleaned = series.astype(str).str.replace(AMOUNT_NOISE, "", regex=True)
    return pd.to_numeric(cleaned, errors="coerce")


def _read_table(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix in {".xlsx", ".xlsm"}:
        return pd.read_excel(path, engine="openpyxl")
    if suffix == ".csv":
        return pd.read_csv(path)
    raise ValueError(f"Unsupported project file type: {path.suffix}")


def normalize_project_frame(raw: pd.DataFrame) -> pd.DataFrame:
    """Rename known headers to canonical upper-case columns and coerce amounts."""

    lookup = _alias_lookup()
    renamed = {}
    for col in raw.columns:
        canonical = lookup.get(_header_key(col))
        if canonical and canonical not in renamed.values():
            renamed[col] = canonical
    df = raw.rename(columns=renamed)[list(renamed.values())].copy()

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Project table is missing required columns: {', '.join(missing)}")

    for col in ("TOTAL_CONTRACT_AMOUNT", "PHYSICAL_ACCOMPLISHMENT", "BUDGET_UTILIZED", "MATERIAL_COST", "LABOR_COST"):
        if col in df.columns:
            df[col] = _to_amount(df[col])
    df = df.dropna(subset=["PROJECT_NAME"])
    for col in ("TOTAL_CONTRACT_AMOUNT", "PHYSICAL_ACCOMPLISHMENT", "BUDGET_UTILIZED"):
        df[col] = df[col].fillna(0.0)

    out_of_range = df.loc[(df["PHYSICAL_ACCOMPLISHMENT"] < 0) | (df["PHYSICAL_ACCOMPLISHMENT"] > 100)]
    for _, row in out_of_range.iterrows():
        logger.warning(
            "Physical accomplishment %s%% for %s is outside 0-100; using it as given",
            row["PHYSICAL_ACCOMPLISHMENT"],
            row["PROJECT_NAME"],
        )
    return df.reset_index(drop=True)


def _text(row: pd.Series, column: str) -> str:
    value = row.get(column)
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def _optional_float(row: pd.Series, column: str) -> Optional[float]:
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    return float(value)


def _explicit_ids(df: pd.DataFrame) -> Set[str]:
    if "PROJECT_ID" not in df.columns:
        return set()
    ids = [_text(row, "PROJECT_ID") for _, row in df.iterrows()]
    counts = Counter(value for value in ids if value)
    duplicates = sorted(value for value, n in counts.items() if n > 1)
    if duplicates:
        raise ValueError(f"Project table repeats ids: {', '.join(duplicates)}")
    return set(counts)


def projects_from_frame(df: pd.DataFrame) -> List[Project]:
    """
    Build projects from a normalized register table.

    Rows without an id get ``"<category>-NNN"``, skipping numbers already
    used by ids written in the table.  Repeated explicit ids raise
    ``ValueError``.
    """

    projects: List[Project] = []
    taken = _explicit_ids(df)
    counters: Dict[str, int] = {}
    for _, row in df.iterrows():
        raw_category = _text(row, "CATEGORY")
        category = normalize_category(raw_category) or raw_category or "uncategorized"
        project_id = _text(row, "PROJECT_ID")
        if not project_id:
            while True:
                counters[category] = counters.get(category, 0) + 1
                project_id = f"{category}-{counters[category]:03d}"
                if project_id not in taken:
                    break
            taken.add(project_id)
        projects.append(
            Project(
                id=project_id,
                name=_text(row, "PROJECT_NAME"),
                category=category,
                financials=ProjectFinancials(
                    total_contract_amount=float(row["TOTAL_CONTRACT_AMOUNT"]),
                    physical_accomplishment=float(row["PHYSICAL_ACCOMPLISHMENT"]),
                    budget_utilized=float(row["BUDGET_UTILIZED"]),
                ),
                status=parse_project_status(_text(row, "STATUS")) or ProjectStatus.PLANNING,
                pow_status=parse_pow_status(_text(row, "POW_STATUS")) or PowStatus.PENDING,
                location=_text(row, "LOCATION"),
                contractor=_text(row, "CONTRACTOR"),
                start_date=_text(row, "START_DATE") or None,
                end_date=_text(row, "END_DATE") or None,
                material_cost=_optional_float(row, "MATERIAL_COST"),
                labor_cost=_optional_float(row, "LABOR_COST"),
            )
        )
    return projects


def load_projects(path: Path) -> List[Project]:
    """Load projects from a CSV or Excel register.

    Raises ``FileNotFoundError`` for a missing file and ``ValueError`` when a
    required column cannot be found under any known header.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Project file not found: {path}")
    df = normalize_project_frame(_read_table(path))
    projects = projects_from_frame(df)
    logger.debug("Loaded %d projects from %s", len(projects), path)
    return projects


def load_store(path: Path, tolerance: float = STRICT_TOLERANCE) -> ProjectStore:
    return ProjectStore(load_projects(path), tolerance=tolerance)


def projects_to_frame(projects: Iterable[Project]) -> pd.DataFrame:
    rows = []
    for p in projects:
        rows.append(
            {
                "PROJECT_ID": p.id,
                "PROJECT_NAME": p.name,
                "CATEGORY": p.category,
                "TOTAL_CONTRACT_AMOUNT": p.total_contract_amount,
                "PHYSICAL_ACCOMPLISHMENT": p.physical_accomplishment,
                "BUDGET_UTILIZED": p.budget_utilized,
                "STATUS": p.status.label,
                "POW_STATUS": p.pow_status.value,
                "LOCATION": p.location,
                "CONTRACTOR": p.contractor,
                "START_DATE": p.start_date,
                "END_DATE": p.end_date,
                "MATERIAL_COST": p.material_cost,
                "LABOR_COST": p.labor_cost,
            }
        )
    return pd.DataFrame(rows, columns=list(HEADER_ALIASES))


__all__ = [
    "HEADER_ALIASES",
    "REQUIRED_COLUMNS",
    "load_projects",
    "load_store",
    "normalize_project_frame",
    "projects_from_frame",
    "projects_to_frame",
]
