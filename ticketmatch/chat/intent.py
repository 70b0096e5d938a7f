from __future__ import annotations

import json
import logging
import re
from typing import Any

from groq import Groq

from ..catalog.models import BudgetRange, UserPreferences
from ..embeddings.features import (
    find_group_size,
    find_price_mention,
    match_city,
    match_sport,
    parse_event_date,
)
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from .models import ConversationState, ConversationTurn

logger = logging.getLogger(__name__)

_MAX_TURNS = 6  # 3 exchanges
_AROUND_SPREAD = 0.2

# ---------------------------------------------------------------------------
# LLM Prompt
# ---------------------------------------------------------------------------

PREFERENCE_EXTRACTION_PROMPT = """\
You are a sports ticket request parser. Given a user message (and optionally \
prior conversation context), extract structured ticket package preferences as JSON.

Return ONLY valid JSON with these fields (omit fields you cannot infer):
{
  "location": "city name, e.g. New York",
  "sport": "Basketball / Baseball / Football / Hockey",
  "hospitality_type": "VIP / Club / Premium / Standard",
  "date": "YYYY-MM-DD",
  "people_count": 4,
  "budget": {"min": 0, "max": 300}
}

Resolve team names to their sport (e.g. Knicks -> Basketball). \
Use Title Case for location and sport. Never invent values the user did not imply."""

_ISO_DATE_RE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")

# ---------------------------------------------------------------------------
# Rule-based extraction
# ---------------------------------------------------------------------------


def _budget_from_text(message: str) -> BudgetRange | None:
    mention = find_price_mention(message)
    if mention is None:
        return None

    qualifier, low, high = mention
    if low != high:
        return BudgetRange(min=low, max=high)
    if qualifier == "around":
        return BudgetRange(min=low * (1 - _AROUND_SPREAD), max=low * (1 + _AROUND_SPREAD))
    return BudgetRange(min=0.0, max=low)


def _date_from_text(message: str) -> str | None:
    for candidate in _ISO_DATE_RE.findall(message):
        try:
            return parse_event_date(candidate).isoformat()
        except ValueError:
            continue
    return None


def extract_preferences(message: str) -> UserPreferences:
    """Pull whatever preferences the message states explicitly; unknown fields stay None."""
    lower = message.lower()

    city = match_city(message)
    sport = match_sport(message)

    hospitality: str | None = None
    if "vip" in lower or "premium" in lower:
        hospitality = "VIP"
    elif "club" in lower:
        hospitality = "Club"

    people = find_group_size(message)

    return UserPreferences(
        location=city.title() if city else None,
        sport=sport.title() if sport else None,
        hospitality_type=hospitality,
        date=_date_from_text(message),
        people_count=people if people and people > 0 else None,
        budget=_budget_from_text(message),
    )


# ---------------------------------------------------------------------------
# Conversation Accumulation
# ---------------------------------------------------------------------------


def accumulate_preferences(
    accumulated: UserPreferences,
    new_preferences: UserPreferences,
) -> UserPreferences:
    """Merge a newer partial extraction into the running preferences, field by field."""
    merged: dict[str, Any] = accumulated.model_dump(exclude_none=True)
    for key, value in new_preferences.model_dump(exclude_none=True).items():
        if value not in ("", [], {}):
            merged[key] = value
    return UserPreferences(**merged)


def update_conversation_state(
    state: ConversationState,
    user_message: str,
    assistant_message: str,
    new_preferences: UserPreferences,
    result_ids: list[str] | None = None,
) -> ConversationState:
    turns = list(state.turns)
    turns.append(ConversationTurn(role="user", content=user_message))
    turns.append(ConversationTurn(role="assistant", content=assistant_message))

    # Keep only last _MAX_TURNS messages
    if len(turns) > _MAX_TURNS:
        turns = turns[-_MAX_TURNS:]

    return ConversationState(
        turns=turns,
        preferences=accumulate_preferences(state.preferences, new_preferences),
        last_results_ids=result_ids or state.last_results_ids,
    )


# ---------------------------------------------------------------------------
# LLM Call
# ---------------------------------------------------------------------------


def _build_messages(message: str, state: ConversationState | None) -> list[dict[str, str]]:
    messages = [{"role": "system", "content": PREFERENCE_EXTRACTION_PROMPT}]
    if state and state.turns:
        history = [f"{turn.role}: {turn.content}" for turn in state.turns[-4:]]
        known = state.preferences.model_dump(exclude_none=True)
        if known:
            history.append(f"Known preferences so far: {json.dumps(known)}")
        context = "\n".join(history)
        messages.append(
            {"role": "user", "content": f"Conversation context:\n{context}\n\nLatest message: {message}"}
        )
    else:
        messages.append({"role": "user", "content": message})
    return messages


def extract_preferences_llm(
    message: str,
    conversation_state: ConversationState | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> UserPreferences:
    if not config.enabled or not config.api_key:
        return extract_preferences(message)

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=_build_messages(message, conversation_state),
            max_tokens=config.max_tokens,
            temperature=0.1,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or "{}"
        parsed = json.loads(content)
        known_fields = set(UserPreferences.model_fields)
        return UserPreferences(**{k: v for k, v in parsed.items() if k in known_fields and v is not None})

    except Exception:
        logger.warning("Preference extraction via LLM failed, using rule-based extraction", exc_info=True)
        return extract_preferences(message)
