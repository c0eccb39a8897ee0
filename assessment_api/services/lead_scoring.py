"""
Heuristic lead scoring for finished assessments.

Additive point scheme over the free-text intake answers, clamped to 0-100.
Pure: no I/O, no randomness.
"""

import logging
import re

from assessment_api.schemas.assessment import BusinessIntake

logger = logging.getLogger(__name__)

BASE_POINTS = 25
MAX_SCORE = 100
MIN_SCORE = 0

# (threshold, points), evaluated highest first
TIME_VALUE_BANDS: tuple[tuple[float, int], ...] = ((100, 30), (50, 20), (25, 10))
TIME_SAVINGS_BANDS: tuple[tuple[float, int], ...] = ((10, 25), (5, 15), (2, 10))

HIGH_FIT_BONUS = 15
MEDIUM_FIT_BONUS = 8
PAIN_POINT_BONUS = 10
NO_TOOLING_BONUS = 10
DETAILED_ANSWER_BONUS = 20
DETAILED_ANSWER_MIN_CHARS = 50

HIGH_FIT_BUSINESS_TYPES = (
    "dental", "dentist", "medical", "clinic", "law", "legal", "attorney",
    "real estate", "insurance", "accounting", "chiropractic", "chiropractor",
    "veterinary", "salon", "spa", "med spa",
)
MEDIUM_FIT_BUSINESS_TYPES = (
    "restaurant", "retail", "contractor", "plumbing", "hvac", "roofing",
    "fitness", "gym", "consulting", "agency", "cleaning", "landscaping", "auto", "automotive",
)
AUTOMATION_PAIN_TERMS = (
    "manual", "schedul", "appointment", "reminder", "follow-up", "follow up",
    "followup", "data entry", "paperwork", "booking", "missed call", "invoic",
)
NO_TOOLING_TERMS = (
    "manual", "manually", "none", "nothing", "spreadsheet", "excel", "google sheets",
    "paper", "by hand", "pen",
)

_MONEY_RE = re.compile(r"\$?\s*(\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)")
_HOURS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:hours?|hrs?)\b", re.IGNORECASE)
_NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)")


def _vocabulary_pattern(terms: tuple[str, ...], whole_word: bool) -> re.Pattern:
    body = "|".join(re.escape(t) for t in terms)
    suffix = r"s?\b" if whole_word else ""
    return re.compile(rf"\b(?:{body}){suffix}", re.IGNORECASE)


_HIGH_FIT_RE = _vocabulary_pattern(HIGH_FIT_BUSINESS_TYPES, whole_word=True)
_MEDIUM_FIT_RE = _vocabulary_pattern(MEDIUM_FIT_BUSINESS_TYPES, whole_word=True)
_PAIN_RE = _vocabulary_pattern(AUTOMATION_PAIN_TERMS, whole_word=False)
_NO_TOOLING_RE = _vocabulary_pattern(NO_TOOLING_TERMS, whole_word=True)


def extract_time_value(text: str | None) -> float:
    """Dollar amount from e.g. "$1,250.00 per hour". 0.0 when absent."""
    if not text:
        return 0.0
    match = _MONEY_RE.search(text)
    if not match:
        return 0.0
    return float(match.group(1).replace(",", ""))


def extract_time_savings(text: str | None) -> float:
    """
    Hours from e.g. "about 10 hours a week".

    An hour/hr-suffixed number wins over an earlier bare number, so
    "2-3 days, roughly 12 hrs" yields 12.
    """
    if not text:
        return 0.0
    match = _HOURS_RE.search(text) or _NUMBER_RE.search(text)
    return float(match.group(1)) if match else 0.0


def _band_points(value: float, bands: tuple[tuple[float, int], ...]) -> int:
    for threshold, points in bands:
        if value >= threshold:
            return points
    return 0


def _business_type_points(business_type: str | None) -> int:
    if not business_type:
        return 0
    if _HIGH_FIT_RE.search(business_type):
        return HIGH_FIT_BONUS
    if _MEDIUM_FIT_RE.search(business_type):
        return MEDIUM_FIT_BONUS
    return 0


def score_breakdown(intake: BusinessIntake) -> dict[str, int]:
    """Points contributed by each signal, before clamping."""
    pain_points = intake.pain_points or ""
    current_solution = intake.current_solution or ""
    return {
        "base": BASE_POINTS,
        "time_value": _band_points(extract_time_value(intake.time_value), TIME_VALUE_BANDS),
        "time_savings": _band_points(extract_time_savings(intake.time_savings), TIME_SAVINGS_BANDS),
        "business_type": _business_type_points(intake.business_type),
        "pain_points": PAIN_POINT_BONUS if _PAIN_RE.search(pain_points) else 0,
        "current_solution": NO_TOOLING_BONUS if _NO_TOOLING_RE.search(current_solution) else 0,
        "detail": DETAILED_ANSWER_BONUS if len(pain_points) > DETAILED_ANSWER_MIN_CHARS else 0,
    }


def score(intake: BusinessIntake) -> int:
    """Lead score in [0, 100] for a completed intake."""
    breakdown = score_breakdown(intake)
    total = max(MIN_SCORE, min(sum(breakdown.values()), MAX_SCORE))
    logger.debug("Lead score %d from %s", total, breakdown)
    return total
