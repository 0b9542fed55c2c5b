"""
Weighted scoring for laboratory and classroom facility assessments.

Each criterion is rated out of ``MAX_RATING``.  A category scores
``sum(ratings) / (criteria * MAX_RATING) * 100`` and contributes
``score * weight / 100`` to the overall 0-100 score.  The weights of each
form add up to 100.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

logger = logging.getLogger(__name__)

MAX_RATING = 5

# (form key, display name, weight %)
CATEGORY_WEIGHTS: Tuple[Tuple[str, str, float], ...] = (
    ("accessibility", "Accessibility", 5),
    ("functionality", "Functionality", 5),
    ("utility", "Utility", 10),
    ("sanitation", "Sanitation", 10),
    ("instructionalTools", "Instructional Tools", 10),
    ("laboratoryEquipment", "Laboratory Equipment & Safety", 20),
    ("furnitureFixtures", "Furniture and Fixtures", 10),
    ("space", "Space", 10),
    ("disasterPreparedness", "Disaster Preparedness & Security", 10),
    ("inclusivity", "Inclusivity", 5),
)

CLASSROOM_CATEGORY_WEIGHTS: Tuple[Tuple[str, str, float], ...] = (
    ("accessibility", "Accessibility", 15),
    ("functionality", "Functionality", 15),
    ("utility", "Utility", 10),
    ("sanitation", "Sanitation", 10),
    ("equipment", "Equipment", 10),
    ("furnitureFixtures", "Furniture and Fixtures", 10),
    ("space", "Space", 15),
    ("disasterPreparedness", "Disaster Preparedness", 10),
    ("inclusivity", "Inclusivity", 5),
)

# Lower bound of each band, highest first
_LABORATORY_RATINGS = ((90, "Excellent"), (75, "Good"), (60, "Needs Improvement"))
_LABORATORY_CONDITIONS = ((90, "Excellent"), (75, "Good"), (60, "Fair"))
_CLASSROOM_RATINGS = (
    (90, "Outstanding Performance"),
    (80, "Very Good"),
    (70, "Good"),
    (60, "Satisfactory"),
    (50, "Fair"),
)
_CLASSROOM_CONDITIONS = ((85, "Excellent"), (70, "Good"), (50, "Needs Improvement"))

FORMS = {
    "laboratory": (CATEGORY_WEIGHTS, _LABORATORY_RATINGS, "Unsatisfactory", _LABORATORY_CONDITIONS, "Poor"),
    "classroom": (
        CLASSROOM_CATEGORY_WEIGHTS,
        _CLASSROOM_RATINGS,
        "Needs Significant Improvement",
        _CLASSROOM_CONDITIONS,
        "Unusable",
    ),
}


@dataclass(frozen=True)
class CategoryScore:
    name: str
    total_rating: float
    max_possible_score: float
    category_score: float
    weight: float
    weighted_score: float


def _form(form: str):
    try:
        return FORMS[form]
    except KeyError:
        raise ValueError(f"Unknown assessment form: {form!r}") from None


def extract_ratings(category_data: Any) -> List[float]:
    """
    Collect the ratings of one category.

    Criteria are either bare numbers or ``{"rating": n, "remarks": ...}``
    entries; an entry with a missing rating counts as 0 but still adds to the
    maximum.  Anything else (remarks strings, nested notes) is skipped.
    """

    if not isinstance(category_data, Mapping):
        return []
    ratings: List[float] = []
    for value in category_data.values():
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            ratings.append(float(value))
        elif isinstance(value, Mapping) and "rating" in value:
            ratings.append(float(value.get("rating") or 0))
    return ratings


def category_score(ratings: Sequence[float], max_rating: float = MAX_RATING) -> float:
    max_possible = len(ratings) * max_rating
    return sum(ratings) / max_possible * 100 if max_possible > 0 else 0.0


def weighted_score(score: float, weight: float) -> float:
    return score * weight / 100


def score_assessment(form_data: Mapping[str, Any], form: str = "laboratory") -> List[CategoryScore]:
    """Score every category of ``form``; a category missing from ``form_data`` scores 0."""

    weights = _form(form)[0]
    scores: List[CategoryScore] = []
    for key, name, weight in weights:
        if key not in form_data:
            logger.debug("Assessment has no %s section; scoring it 0", key)
        ratings = extract_ratings(form_data.get(key))
        score = category_score(ratings)
        scores.append(
            CategoryScore(
                name=name,
                total_rating=sum(ratings),
                max_possible_score=len(ratings) * MAX_RATING,
                category_score=score,
                weight=weight,
                weighted_score=weighted_score(score, weight),
            )
        )
    return scores


def overall_weighted_score(scores: Iterable[CategoryScore]) -> float:
    return sum(score.weighted_score for score in scores)


def _band(value: float, bands: Sequence[Tuple[float, str]], floor: str) -> str:
    for lower, label in bands:
        if value >= lower:
            return label
    return floor


def rating_interpretation(overall: float, form: str = "laboratory") -> str:
    _weights, ratings, floor, _conditions, _condition_floor = _form(form)
    return _band(overall, ratings, floor)


def overall_condition(overall: float, form: str = "laboratory") -> str:
    _weights, _ratings, _floor, conditions, condition_floor = _form(form)
    return _band(overall, conditions, condition_floor)


def summarize_assessment(form_data: Mapping[str, Any], form: str = "laboratory") -> Dict[str, Any]:
    """Category scores plus the overall score and its labels, as shown on the assessment report."""

    scores = score_assessment(form_data, form)
    overall = overall_weighted_score(scores)
    return {
        "categories": scores,
        "overall": overall,
        "rating": rating_interpretation(overall, form),
        "condition": overall_condition(overall, form),
    }


__all__ = [
    "CATEGORY_WEIGHTS",
    "CLASSROOM_CATEGORY_WEIGHTS",
    "MAX_RATING",
    "CategoryScore",
    "category_score",
    "extract_ratings",
    "overall_condition",
    "overall_weighted_score",
    "rating_interpretation",
    "score_assessment",
    "summarize_assessment",
    "weighted_score",
]
