from __future__ import annotations

from ..catalog.models import TicketPackage

EXCELLENT_MATCH_SCORE = 80
GOOD_MATCH_SCORE = 60
BUDGET_FRIENDLY_PRICE = 200


def format_price(price: float) -> str:
    if float(price).is_integer():
        return f"${price:,.0f}"
    return f"${price:,.2f}"


def vector_match_reasons(query: str, package: TicketPackage, score: int) -> list[str]:
    """Explain a vector-path match; the same (query, package, score) always yields the same list."""
    reasons: list[str] = []
    lower_query = query.lower()

    if package.location and package.location.lower() in lower_query:
        reasons.append(f"Located in {package.location} as requested")

    if package.sport_type and package.sport_type.lower() in lower_query:
        reasons.append(f"Perfect for {package.sport_type} fans")

    if ("budget" in lower_query or "cheap" in lower_query) and package.price < BUDGET_FRIENDLY_PRICE:
        reasons.append(f"Budget-friendly at {format_price(package.price)}")

    level = package.hospitality_level.strip().title()
    if ("premium" in lower_query or "vip" in lower_query) and level in ("Platinum", "Gold"):
        reasons.append(f"Premium {level} experience")

    if "vip" in lower_query and "vip" in package.hospitality_type.lower():
        reasons.append("Includes VIP access and amenities")

    if score > EXCELLENT_MATCH_SCORE:
        reasons.append("Excellent match for your preferences")
    elif score > GOOD_MATCH_SCORE:
        reasons.append("Good match for your requirements")

    return reasons or [f"{score}% match for your search"]
