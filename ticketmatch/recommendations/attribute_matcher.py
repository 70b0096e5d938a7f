"""
Attribute-weighted scoring of packages against structured preferences.

This path never touches vectors. Each preference field that is set adds a
fixed weight when the package satisfies it:

    location     30   case-insensitive substring of the package location
    sport        25   case-insensitive substring of the package sport
    hospitality  20   case-insensitive substring of the hospitality type
    date         15   scaled by 1 - days/30 inside a 30-day window
    party size   10   available tickets cover the party
    budget       20   price inside [min, max]; 10 when below min

Being under budget is rewarded, never penalised; above max scores nothing
for the budget term.
"""
from __future__ import annotations

import math
from collections.abc import Sequence

from ..catalog.models import RecommendationScore, TicketPackage, UserPreferences
from ..embeddings.features import parse_event_datetime
from .errors import InvalidInputError, check_k
from .reasons import format_price

WEIGHTS: dict[str, float] = {
    "location": 30,
    "sport": 25,
    "hospitality": 20,
    "date": 15,
    "people": 10,
    "budget_within": 20,
    "budget_under": 10,
}
DATE_WINDOW_DAYS = 30
_SECONDS_PER_DAY = 24 * 60 * 60


def _contains(haystack: str, needle: str | None) -> bool:
    return bool(needle) and needle.lower() in haystack.lower()


def _days_apart(package_date: str, preferred: str) -> float | None:
    """Fractional days between the two moments; times of day count."""
    try:
        delta = parse_event_datetime(package_date) - parse_event_datetime(preferred)
    except ValueError:
        return None
    return abs(delta.total_seconds()) / _SECONDS_PER_DAY


def score_package(package: TicketPackage, preferences: UserPreferences) -> tuple[int, list[str]]:
    """Return the rounded additive score and the reasons for the terms that fired."""
    score = 0.0
    reasons: list[str] = []

    if _contains(package.location, preferences.location):
        score += WEIGHTS["location"]
        reasons.append(f"Matches your location preference: {package.location}")

    if _contains(package.sport_type, preferences.sport):
        score += WEIGHTS["sport"]
        reasons.append(f"Perfect for {package.sport_type} fans")

    if _contains(package.hospitality_type, preferences.hospitality_type):
        score += WEIGHTS["hospitality"]
        reasons.append(f"Includes {package.hospitality_type} experience")

    if preferences.date:
        days = _days_apart(package.date, preferences.date)
        if days is not None and days <= DATE_WINDOW_DAYS:
            score += WEIGHTS["date"] * (1 - days / DATE_WINDOW_DAYS)
            reasons.append(
                "On your preferred date"
                if days < 1
                else f"Within {math.ceil(days)} days of your preferred date"
            )

    if preferences.people_count and package.available_tickets >= preferences.people_count:
        score += WEIGHTS["people"]
        reasons.append(f"Has {package.available_tickets} tickets available for your group")

    budget = preferences.budget
    if budget is not None:
        if budget.min <= package.price <= budget.max:
            score += WEIGHTS["budget_within"]
            reasons.append(f"Within your budget at {format_price(package.price)}")
        elif package.price < budget.min:
            score += WEIGHTS["budget_under"]
            reasons.append(f"Under your budget at {format_price(package.price)}")

    return int(round(score)), reasons


def match_preferences(
    preferences: UserPreferences,
    packages: Sequence[TicketPackage],
    k: int = 5,
) -> list[RecommendationScore]:
    if not isinstance(preferences, UserPreferences):
        raise InvalidInputError(f"expected UserPreferences, got {type(preferences).__name__}")
    k = check_k(k)

    scored: list[tuple[int, TicketPackage, list[str]]] = []
    for package in packages:
        score, reasons = score_package(package, preferences)
        if score > 0:
            scored.append((score, package, reasons))

    # Stable sort on the raw score: ties keep catalog order, and packages
    # above 100 stay ordered before being capped to the 0-100 scale.
    scored.sort(key=lambda item: item[0], reverse=True)
    return [
        RecommendationScore(package=package, score=min(score, 100), reasons=reasons)
        for score, package, reasons in scored[:k]
    ]
