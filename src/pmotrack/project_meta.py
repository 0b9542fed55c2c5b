"""
Shared metadata for project categories and statuses surfaced in the dashboard.
"""

from __future__ import annotations

import math
import re
from typing import List, Optional, Tuple

from .models import PowStatus, ProjectStatus

# Keep tuple structure to preserve sidebar order for display
CATEGORY_CHOICES: Tuple[Tuple[str, str, str], ...] = (
    ("higher-education-program", "Higher Education Program", "University Operations"),
    ("advanced-education-program", "Advanced Education Program", "University Operations"),
    ("research-program", "Research Program", "University Operations"),
    ("technical-advisory-extension-program", "Technical Advisory Extension Program", "University Operations"),
    ("gaa-funded-projects", "GAA-Funded Projects (National Government)", "Construction of Infrastructure"),
    ("locally-funded-projects", "Locally-Funded Projects", "Construction of Infrastructure"),
    ("special-grants-projects", "Special Grants/ Partnerships/ Income-Generating Projects", "Construction of Infrastructure"),
    ("classrooms-csu-cc-bxu", "Classrooms CSU CC BXU", "Classroom and Administrative Offices"),
    ("administrative-offices-csu-cc-bxu", "Administrative Offices CSU CC BXU", "Classroom and Administrative Offices"),
    ("prioritization-matrix", "Prioritization Matrix", "Classroom and Administrative Offices"),
    ("major-repairs", "Major Repairs", "Repairs"),
    ("minor-repairs", "Minor Repairs", "Repairs"),
    ("memorandum-of-agreements", "Memorandum of Agreements", "Policies"),
    ("memorandum-of-understanding", "Memorandum of Understanding", "Policies"),
    ("gad-budget-and-plans", "GAD Budget and Plans", "GAD Parity and Knowledge Management"),
    # Legacy ids still present in older records
    ("construction", "Construction", "Construction of Infrastructure"),
    ("university-operations", "University Operations", "University Operations"),
    ("classroom-administrative-offices", "Classroom and Administrative Offices", "Classroom and Administrative Offices"),
)

CATEGORY_LABELS = {slug: label for slug, label, _group in CATEGORY_CHOICES}
CATEGORY_GROUPS = {slug: group for slug, _label, group in CATEGORY_CHOICES}

# Currency symbols, thousands separators and percent signs found in register cells
AMOUNT_NOISE = re.compile(r"PHP|[₱$,%\s]", re.IGNORECASE)

_STATUS_ALIASES = {
    "in progress": ProjectStatus.ONGOING,
    "in_progress": ProjectStatus.ONGOING,
    "on-hold": ProjectStatus.ON_HOLD,
}


def category_display_strings() -> List[str]:
    """Return formatted strings like ``\"research-program - Research Program\"``."""

    return [f"{slug} - {label}" for slug, label, _group in CATEGORY_CHOICES]


def normalize_category(value: str) -> Optional[str]:
    """
    Normalize a category id or label into the canonical slug.

    Accepts ``\"major-repairs\"``, ``\"Major Repairs\"`` or a display string
    produced by :func:`category_display_strings`.  Returns ``None`` if the
    value cannot be mapped.
    """

    if not value:
        return None

    candidate = str(value).strip()
    if not candidate:
        return None

    if " - " in candidate:
        candidate = candidate.split(" - ", 1)[0].strip()

    slug = candidate.lower()
    if slug in CATEGORY_LABELS:
        return slug

    compressed = slug.replace(" ", "-").replace("_", "-")
    if compressed in CATEGORY_LABELS:
        return compressed

    for known, label in CATEGORY_LABELS.items():
        if slug == label.lower():
            return known
    return None


def category_group(value: str) -> Optional[str]:
    slug = normalize_category(value)
    if not slug:
        return None
    return CATEGORY_GROUPS.get(slug)


def parse_project_status(value: object) -> Optional[ProjectStatus]:
    """Map backend enum values (``ON_HOLD``) and UI labels (``On Hold``) to a status."""

    if isinstance(value, ProjectStatus):
        return value
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in _STATUS_ALIASES:
        return _STATUS_ALIASES[lowered]
    key = lowered.replace(" ", "_").upper()
    try:
        return ProjectStatus(key)
    except ValueError:
        return None


def parse_pow_status(value: object) -> Optional[PowStatus]:
    if isinstance(value, PowStatus):
        return value
    if value is None:
        return None
    text = str(value).strip().lower()
    for status in PowStatus:
        if status.value.lower() == text:
            return status
    return None



def parse_amount(value: object) -> Optional[float]:
    """Read ``"₱1,250,000"``, ``"PHP 118,000"``, ``"94.2%"`` or a plain number; ``None`` if unreadable."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if isinstance(value, float) and math.isnan(value) else float(value)
    text = AMOUNT_NOISE.sub("", str(value))
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None
