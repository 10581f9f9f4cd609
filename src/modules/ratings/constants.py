"""Quality rating constants: issue categories, recommendations and crop icons."""

from __future__ import annotations

from typing import Dict, NamedTuple, Optional

from django.db import models


class QualityIssue(models.TextChoices):
    BRUISING = "BRUISING", "Bruising detected"
    SIZE_INCONSISTENCY = "SIZE_INCONSISTENCY", "Size inconsistency"
    RIPENESS_ISSUES = "RIPENESS_ISSUES", "Ripeness issues"
    FRESHNESS_CONCERNS = "FRESHNESS_CONCERNS", "Freshness concerns"
    PACKAGING_PROBLEMS = "PACKAGING_PROBLEMS", "Packaging problems"


class Advice(NamedTuple):
    text: str
    tutorial_id: Optional[str]


RECOMMENDATIONS: Dict[str, Advice] = {
    QualityIssue.BRUISING: Advice(
        "Handle produce gently during transport. Use padded crates and avoid "
        "stacking too high.",
        "handling-101",
    ),
    QualityIssue.SIZE_INCONSISTENCY: Advice(
        "Sort produce by size before packing. Buyers prefer uniform sizes in "
        "each batch.",
        "grading-basics",
    ),
    QualityIssue.RIPENESS_ISSUES: Advice(
        "Harvest at optimal ripeness. Check color and firmness before picking.",
        "harvest-timing",
    ),
    QualityIssue.FRESHNESS_CONCERNS: Advice(
        "Reduce time between harvest and delivery. Store in cool, shaded areas.",
        "post-harvest",
    ),
    QualityIssue.PACKAGING_PROBLEMS: Advice(
        "Use proper crates with ventilation. Avoid overpacking containers.",
        "packaging-guide",
    ),
}

CROP_ICONS: Dict[str, str] = {
    "Tomato": "🍅",
    "Potato": "🥔",
    "Onion": "🧅",
    "Carrot": "🥕",
    "Cabbage": "🥬",
    "Chilli": "🌶️",
    "Beans": "🫛",
    "Rice": "🌾",
    "Wheat": "🌾",
    "Mango": "🥭",
    "Banana": "🍌",
    "Apple": "🍎",
    "Orange": "🍊",
    "Grapes": "🍇",
}
DEFAULT_CROP_ICON = "🥬"

MIN_STARS = 1
MAX_STARS = 5
TREND_MONTHS = 6
DEFAULT_RATINGS_PAGE_SIZE = 10
