from __future__ import annotations

import logging
import re

from ..catalog.models import UserPreferences
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..recommendations.engine import RankingEngine
from .intent import extract_preferences_llm, update_conversation_state
from .models import ChatResponse, ChatResponseType, ConversationState

logger = logging.getLogger(__name__)

POPULAR_COUNT = 5

_GREETING_RE = re.compile(r"\b(?:hello|hi|hey)\b", re.IGNORECASE)
_HELP_RE = re.compile(r"\bhelp\b", re.IGNORECASE)
_THANKS_RE = re.compile(r"\bthanks?\b|\bthank you\b", re.IGNORECASE)
_TICKET_INTENT_WORDS = (
    "recommend", "suggest", "find", "show", "want", "looking",
    "tickets", "events", "games", "need",
)

GREETING_REPLY = (
    "Hello! I'm here to help you find the perfect event ticket package. Tell me about "
    "your preferences like location, sport, number of people, or hospitality type, and "
    "I'll suggest the best options for you."
)
HELP_REPLY = (
    "I can help you find event ticket packages! Just tell me:\n"
    "- Where you want to go (location)\n"
    "- What sport you're interested in\n"
    "- How many people are in your group\n"
    "- What type of hospitality experience you want\n"
    "- Your preferred date or budget\n\n"
    "I'll then suggest packages that match your criteria!"
)
THANKS_REPLY = "You're welcome! I'm here whenever you need help finding the perfect ticket package."
HINT_REPLY = (
    "I'm here to help you find event tickets! Try asking me something like "
    "'Show me basketball tickets in New York' or 'Find VIP packages for 4 people'."
)
POPULAR_REPLY = (
    "I'd be happy to help you find the perfect ticket package! "
    "Here are some popular options to get you started:"
)


def _describe_preferences(preferences: UserPreferences) -> list[str]:
    parts: list[str] = []
    if preferences.location:
        parts.append(f"events in {preferences.location}")
    if preferences.sport:
        parts.append(f"{preferences.sport.lower()} games")
    if preferences.people_count:
        parts.append(f"for {preferences.people_count} people")
    if preferences.hospitality_type:
        parts.append(f"with {preferences.hospitality_type} experience")
    return parts


def contextual_reply(count: int, preferences: UserPreferences) -> str:
    parts = _describe_preferences(preferences)
    if parts:
        return f"Perfect! I found {count} great options for {', '.join(parts)}:"
    return f"Great! I found {count} ticket packages that match what you're looking for:"


def is_ticket_request(message: str) -> bool:
    lower = message.lower()
    return any(word in lower for word in _TICKET_INTENT_WORDS)


class Assistant:
    """Answers one chat message at a time using the ranking engine."""

    def __init__(
        self,
        engine: RankingEngine,
        llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
        k: int = POPULAR_COUNT,
    ) -> None:
        self.engine = engine
        self.llm_config = llm_config
        self.k = k

    def _canned_reply(self, message: str) -> str | None:
        if _GREETING_RE.search(message):
            return GREETING_REPLY
        if _HELP_RE.search(message):
            return HELP_REPLY
        if _THANKS_RE.search(message):
            return THANKS_REPLY
        return None

    def respond(
        self,
        message: str,
        state: ConversationState | None = None,
    ) -> tuple[ChatResponse, ConversationState]:
        state = state or ConversationState()

        canned = self._canned_reply(message)
        if canned is not None:
            new_state = update_conversation_state(state, message, canned, UserPreferences())
            return ChatResponse(
                type=ChatResponseType.message, message=canned, preferences=new_state.preferences,
            ), new_state

        if not is_ticket_request(message):
            new_state = update_conversation_state(state, message, HINT_REPLY, UserPreferences())
            return ChatResponse(
                type=ChatResponseType.message, message=HINT_REPLY, preferences=new_state.preferences,
            ), new_state

        extracted = extract_preferences_llm(message, state, self.llm_config)
        results, strategy = self.engine.rank_query_detailed(message, self.k)

        if results:
            reply = contextual_reply(len(results), extracted)
            response_type = ChatResponseType.results
            suggested = [r.package for r in results]
        else:
            # Nothing cleared the relevance threshold; show the head of the catalog instead
            reply = POPULAR_REPLY
            response_type = ChatResponseType.popular
            suggested = list(self.engine.vectors.packages[: self.k])

        logger.info(
            "Chat message served via %s with %d suggestions", strategy, len(suggested),
        )
        new_state = update_conversation_state(
            state, message, reply, extracted, [p.id for p in suggested],
        )
        return ChatResponse(
            type=response_type,
            message=reply,
            recommendations=results,
            suggested_packages=suggested,
            preferences=new_state.preferences,
        ), new_state
