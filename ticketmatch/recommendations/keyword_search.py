from __future__ import annotations

from collections.abc import Sequence

from ..catalog.models import TicketPackage


def _searchable_text(package: TicketPackage) -> str:
    return " ".join(
        [
            package.venue,
            package.sport_type,
            package.location,
            package.hospitality_type,
            package.seating_category,
            package.description,
        ]
    ).lower()


def search_by_keywords(keywords: str, packages: Sequence[TicketPackage]) -> list[TicketPackage]:
    """Return packages whose text fields contain any of the whitespace-separated terms."""
    terms = [t for t in keywords.lower().split() if t]
    if not terms:
        return []
    return [p for p in packages if any(term in _searchable_text(p) for term in terms)]
