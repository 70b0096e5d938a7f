"""
Block-level feature functions shared by the package and query encoders.

Every block has a fixed width so that a package vector and a query vector
line up position by position. Text blocks use the same function on both
sides: "New York" produces the same location block whether it comes from a
catalog row or from a chat message.
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone

from .config import DEFAULT_ENCODER_CONFIG, EncoderConfig

# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

# 8 one-hot city slots + (east-coast proximity, west-coast proximity)
CITY_FEATURES: dict[str, list[float]] = {
    "new york": [1, 0, 0, 0, 0, 0, 0, 0, 0.8, 0.3],
    "los angeles": [0, 1, 0, 0, 0, 0, 0, 0, 0.2, 0.9],
    "boston": [0, 0, 1, 0, 0, 0, 0, 0, 0.9, 0.1],
    "chicago": [0, 0, 0, 1, 0, 0, 0, 0, 0.4, 0.4],
    "dallas": [0, 0, 0, 0, 1, 0, 0, 0, 0.1, 0.6],
    "san francisco": [0, 0, 0, 0, 0, 1, 0, 0, 0.1, 0.8],
    "denver": [0, 0, 0, 0, 0, 0, 1, 0, 0.2, 0.2],
    "green bay": [0, 0, 0, 0, 0, 0, 0, 1, 0.3, 0.1],
}
CITY_ALIASES: dict[str, str] = {"nyc": "new york", "la": "los angeles", "sf": "san francisco"}
UNKNOWN_CITY = [0, 0, 0, 0, 0, 0, 0, 0, 0.5, 0.5]

# 4 one-hot sport slots + (indoor-ness, seasonality, excitement)
SPORT_FEATURES: dict[str, list[float]] = {
    "basketball": [1, 0, 0, 0, 0.9, 0.8, 0.7],
    "baseball": [0, 1, 0, 0, 0.6, 0.9, 0.8],
    "football": [0, 0, 1, 0, 0.7, 0.6, 0.9],
    "hockey": [0, 0, 0, 1, 0.8, 0.7, 0.8],
}
TEAM_SPORTS: dict[str, str] = {
    "knicks": "basketball",
    "lakers": "basketball",
    "celtics": "basketball",
    "bulls": "basketball",
    "warriors": "basketball",
    "yankees": "baseball",
    "red sox": "baseball",
    "dodgers": "baseball",
    "cowboys": "football",
    "patriots": "football",
    "packers": "football",
    "broncos": "football",
    "49ers": "football",
    "rangers": "hockey",
    "blackhawks": "hockey",
    "avalanche": "hockey",
}
UNKNOWN_SPORT = [0, 0, 0, 0, 0.5, 0.5, 0.5]

HOSPITALITY_LEVEL_SCORES: dict[str, float] = {
    "bronze": 0.25,
    "silver": 0.5,
    "gold": 0.75,
    "platinum": 1.0,
}

PRESTIGIOUS_VENUES = [
    "madison square garden",
    "staples center",
    "fenway park",
    "lambeau field",
    "yankee stadium",
    "td garden",
]

TEXT_KEYWORDS = ["luxury", "premium", "exclusive", "family", "group", "corporate", "special"]

SEATING_KEYWORDS: list[tuple[str, ...]] = [
    ("floor", "court"),
    ("lower",),
    ("upper",),
    ("suite", "box"),
    ("club",),
]

MONTHS = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]

# ---------------------------------------------------------------------------
# Free-text patterns
# ---------------------------------------------------------------------------

_GROUP_WORDS = r"(?:people|persons?|group|friends|family)"
GROUP_SIZE_RE = re.compile(rf"(\d+)\s*{_GROUP_WORDS}", re.IGNORECASE)
_PARTY_TAIL_RE = re.compile(rf"\s*(?:{_GROUP_WORDS}|tickets?|seats?|guests?)\b", re.IGNORECASE)

_NUMBER = r"\d+(?:\.\d+)?(?!\d)"
PRICE_RANGE_RE = re.compile(rf"\$\s*({_NUMBER})\s*(?:-|to)\s*\$?\s*({_NUMBER})", re.IGNORECASE)
PRICE_AMOUNT_RE = re.compile(
    rf"(?:\b(?P<qualifier>under|below|around|less than|up to)\s*)?"
    rf"(?P<dollar>\$)?\s*(?P<amount>{_NUMBER})"
    rf"(?P<unit>\s*(?:dollars|bucks|usd)\b)?",
    re.IGNORECASE,
)


def find_group_size(text: str) -> int | None:
    """Return N for the first "N people/person/group/friends/family" mention."""
    match = GROUP_SIZE_RE.search(text)
    return int(match.group(1)) if match else None


def find_price_mention(text: str) -> tuple[str | None, float, float] | None:
    """
    Find the first price mention in free text.

    Returns ``(qualifier, low, high)``: a dollar range gives its two bounds,
    a single amount gives the same value twice. Single numbers only count
    when they carry a dollar sign, a currency word or a leading
    under/below/around, and never when followed by a party-size word.
    """
    range_match = PRICE_RANGE_RE.search(text)
    if range_match:
        low, high = sorted((float(range_match.group(1)), float(range_match.group(2))))
        if math.isfinite(high):
            return None, low, high

    for match in PRICE_AMOUNT_RE.finditer(text):
        if not (match.group("qualifier") or match.group("dollar") or match.group("unit")):
            continue
        if _PARTY_TAIL_RE.match(text, match.end()):
            continue
        qualifier = match.group("qualifier")
        amount = float(match.group("amount"))
        if not math.isfinite(amount):
            continue
        return (qualifier.lower() if qualifier else None), amount, amount
    return None


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def match_city(text: str) -> str | None:
    lower = text.lower()
    for city in CITY_FEATURES:
        if city in lower:
            return city
    for alias, city in CITY_ALIASES.items():
        if re.search(rf"\b{alias}\b", lower):
            return city
    return None


def match_sport(text: str) -> str | None:
    lower = text.lower()
    for sport in SPORT_FEATURES:
        if sport in lower:
            return sport
    for team, sport in TEAM_SPORTS.items():
        if team in lower:
            return sport
    return None


def location_block(text: str) -> list[float]:
    city = match_city(text)
    return list(CITY_FEATURES[city]) if city else list(UNKNOWN_CITY)


def sport_block(text: str) -> list[float]:
    sport = match_sport(text)
    return list(SPORT_FEATURES[sport]) if sport else list(UNKNOWN_SPORT)


def price_block(price: float, config: EncoderConfig = DEFAULT_ENCODER_CONFIG) -> list[float]:
    if not math.isfinite(price):
        raise ValueError(f"price must be finite, got {price!r}")
    budget_cap, mid_cap, premium_cap = config.price_breakpoints
    return [
        min(price / config.price_ceiling, 1.0),
        1.0 if price < budget_cap else 0.0,
        1.0 if budget_cap <= price < mid_cap else 0.0,
        1.0 if mid_cap <= price < premium_cap else 0.0,
        1.0 if price >= premium_cap else 0.0,
        math.log(price + 1) / 10,
    ]


def query_price_block(query: str, config: EncoderConfig = DEFAULT_ENCODER_CONFIG) -> list[float]:
    mention = find_price_mention(query)
    if mention:
        _, low, high = mention
        return price_block((low + high) / 2, config)

    level = 0.5
    tiers = [0.0, 0.0, 0.0, 0.0]  # budget, mid, premium, luxury
    lower = query.lower()
    if any(w in lower for w in ("cheap", "budget", "affordable")):
        level, tiers[0] = 0.2, 1.0
    elif any(w in lower for w in ("premium", "expensive")):
        level, tiers[2] = 0.8, 1.0
    elif any(w in lower for w in ("vip", "luxury")):
        level, tiers[3] = 1.0, 1.0
    elif any(w in lower for w in ("mid", "moderate")):
        tiers[1] = 1.0
    return [level, *tiers, math.log(level * config.price_ceiling + 1) / 10]


def hospitality_level_score(level: str) -> float:
    return HOSPITALITY_LEVEL_SCORES.get(level.strip().lower(), 0.5)


def hospitality_flags(text: str) -> list[float]:
    lower = text.lower()
    return [
        1.0 if "vip" in lower else 0.0,
        1.0 if "club" in lower else 0.0,
        1.0 if "premium" in lower else 0.0,
        1.0 if "standard" in lower or "basic" in lower else 0.0,
    ]


def hospitality_block(level: str, hospitality_type: str) -> list[float]:
    return [hospitality_level_score(level), *hospitality_flags(hospitality_type)]


def query_hospitality_block(query: str) -> list[float]:
    lower = query.lower()
    if "vip" in lower:
        level = 1.0
    elif "club" in lower or "premium" in lower:
        level = 0.75
    elif "standard" in lower or "basic" in lower:
        level = 0.25
    else:
        level = 0.5
    return [level, *hospitality_flags(query)]


def venue_block(text: str) -> list[float]:
    lower = text.lower()
    return [
        1.0 if any(v in lower for v in PRESTIGIOUS_VENUES) else 0.5,
        1.0 if "center" in lower or "arena" in lower else 0.0,
        1.0 if "stadium" in lower else 0.0,
        1.0 if "field" in lower or "park" in lower else 0.0,
    ]


def _month_fraction(day: date) -> float:
    return (day.month - 1) / 12


def _weekday_fraction(day: date) -> float:
    # Sunday = 0 ... Saturday = 6
    return (day.isoweekday() % 7) / 7


def parse_event_datetime(value: str) -> datetime:
    moment = datetime.fromisoformat(value.strip())
    if moment.tzinfo is not None:
        # Compare everything as naive UTC
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def parse_event_date(value: str) -> date:
    return parse_event_datetime(value).date()


def date_block(event_date: str, today: date) -> list[float]:
    if not event_date.strip():
        return [0.5, 0.5, 0.5, 0.0, 0.0]
    day = parse_event_date(event_date)
    days = abs((day - today).days)
    return [
        min(days / 365, 1.0),
        _month_fraction(day),
        _weekday_fraction(day),
        1.0 if days < 7 else 0.0,
        1.0 if days < 30 else 0.0,
    ]


def query_date_block(query: str, today: date) -> list[float]:
    lower = query.lower()
    if "tonight" in lower or "today" in lower:
        proximity = 0.1
    elif "this week" in lower:
        proximity = 0.2
    elif "this month" in lower:
        proximity = 0.3
    else:
        proximity = 0.5

    month = _month_fraction(today)
    for index, name in enumerate(MONTHS):
        if re.search(rf"\b{name}\b", lower):
            month = index / 12
            break

    return [
        proximity,
        month,
        _weekday_fraction(today),
        1.0 if "week" in lower else 0.0,
        1.0 if "month" in lower else 0.0,
    ]


def availability_block(available: int) -> list[float]:
    return [
        min(available / 100, 1.0),
        1.0 if available > 50 else 0.0,
        1.0 if available < 10 else 0.0,
        1.0 if available == 0 else 0.0,
    ]


def query_availability_block(query: str) -> list[float]:
    size = find_group_size(query)
    if size is None:
        return [0.5, 0.0, 0.0, 0.0]
    # Parties above four need a well-stocked package
    return [min(size / 10, 1.0), 1.0 if size > 4 else 0.0, 0.0, 0.0]


def keyword_block(text: str) -> list[float]:
    lower = text.lower()
    return [1.0 if keyword in lower else 0.0 for keyword in TEXT_KEYWORDS]


def seating_block(text: str) -> list[float]:
    lower = text.lower()
    return [1.0 if any(w in lower for w in words) else 0.0 for words in SEATING_KEYWORDS]


# ---------------------------------------------------------------------------
# Reduced blocks for the fallback encoding
# ---------------------------------------------------------------------------


def basic_location_block(text: str) -> list[float]:
    lower = text.lower()
    return [1.0 if city in lower else 0.0 for city in CITY_FEATURES]


def basic_sport_block(text: str) -> list[float]:
    lower = text.lower()
    return [1.0 if sport in lower else 0.0 for sport in SPORT_FEATURES]
