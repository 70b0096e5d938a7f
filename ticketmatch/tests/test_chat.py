import json
from unittest.mock import MagicMock, patch

import pytest

from ticketmatch.catalog.models import BudgetRange, UserPreferences
from ticketmatch.chat.assistant import (
    GREETING_REPLY,
    HELP_REPLY,
    HINT_REPLY,
    POPULAR_REPLY,
    THANKS_REPLY,
    Assistant,
    contextual_reply,
)
from ticketmatch.chat.intent import (
    accumulate_preferences,
    extract_preferences,
    extract_preferences_llm,
    update_conversation_state,
)
from ticketmatch.chat.models import ChatResponseType, ConversationState
from ticketmatch.llm.config import LLMConfig
from ticketmatch.recommendations.engine import RankedResults

RULES_ONLY = LLMConfig(enabled=False)


def _groq_reply(payload: dict) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = json.dumps(payload)
    return response


# ── Rule-based extraction ────────────────────────────────────────────────


class TestRuleExtraction:
    def test_full_request(self):
        prefs = extract_preferences("VIP basketball tickets in New York for 4 people under $500")
        assert prefs.location == "New York"
        assert prefs.sport == "Basketball"
        assert prefs.hospitality_type == "VIP"
        assert prefs.people_count == 4
        assert prefs.budget == BudgetRange(min=0, max=500)
        assert prefs.date is None

    def test_team_and_date(self):
        prefs = extract_preferences("Knicks game on 2026-12-01 with club seats")
        assert prefs.sport == "Basketball"
        assert prefs.hospitality_type == "Club"
        assert prefs.date == "2026-12-01"
        assert prefs.location is None
        assert prefs.budget is None

    def test_budget_range(self):
        prefs = extract_preferences("Yankees tickets between $200-$400")
        assert prefs.budget == BudgetRange(min=200, max=400)

    def test_budget_around(self):
        prefs = extract_preferences("hockey around $300")
        assert prefs.budget.min == pytest.approx(240)
        assert prefs.budget.max == pytest.approx(360)

    def test_premium_maps_to_vip(self):
        assert extract_preferences("premium seats").hospitality_type == "VIP"

    def test_nothing_to_extract(self):
        assert extract_preferences("what's new?").is_empty()


# ── Accumulation ─────────────────────────────────────────────────────────


class TestAccumulation:
    def test_new_fields_added(self):
        result = accumulate_preferences(UserPreferences(), UserPreferences(sport="Hockey"))
        assert result.sport == "Hockey"

    def test_scalar_overwrite(self):
        old = UserPreferences(location="New York", sport="Basketball")
        new = UserPreferences(location="Boston", hospitality_type="VIP")
        result = accumulate_preferences(old, new)
        assert result.location == "Boston"
        assert result.sport == "Basketball"  # Preserved from old
        assert result.hospitality_type == "VIP"

    def test_turn_window(self):
        state = ConversationState()
        for i in range(5):
            state = update_conversation_state(state, f"message {i}", f"reply {i}", UserPreferences())
        assert len(state.turns) == 6
        assert state.turns[-1].content == "reply 4"
        assert state.turns[0].content == "message 2"

    def test_result_ids_kept_when_none_returned(self):
        state = update_conversation_state(ConversationState(), "a", "b", UserPreferences(), ["pkg-1"])
        state = update_conversation_state(state, "hi", "hello", UserPreferences())
        assert state.last_results_ids == ["pkg-1"]


# ── LLM extraction ───────────────────────────────────────────────────────


class TestLLMExtraction:
    def test_rules_when_disabled(self):
        prefs = extract_preferences_llm("Red Sox tickets in Boston", config=RULES_ONLY)
        assert prefs.sport == "Baseball"
        assert prefs.location == "Boston"

    @patch("ticketmatch.chat.intent.Groq")
    def test_rules_without_api_key(self, mock_groq_cls):
        prefs = extract_preferences_llm("hockey in Denver", config=LLMConfig(api_key="", enabled=True))
        assert prefs.location == "Denver"
        mock_groq_cls.assert_not_called()

    @patch("ticketmatch.chat.intent.Groq")
    def test_successful_extraction(self, mock_groq_cls):
        mock_client = MagicMock()
        mock_groq_cls.return_value = mock_client
        mock_client.chat.completions.create.return_value = _groq_reply({
            "location": "Boston",
            "sport": "Baseball",
            "people_count": 2,
            "budget": {"min": 0, "max": 150},
            "mood": "excited",
        })

        config = LLMConfig(api_key="test-key", enabled=True)
        prefs = extract_preferences_llm("Sox game for me and my dad, cheap", config=config)
        assert prefs.location == "Boston"
        assert prefs.sport == "Baseball"
        assert prefs.people_count == 2
        assert prefs.budget == BudgetRange(min=0, max=150)

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    @patch("ticketmatch.chat.intent.Groq")
    def test_fallback_on_api_error(self, mock_groq_cls):
        mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API error")

        config = LLMConfig(api_key="test-key", enabled=True)
        prefs = extract_preferences_llm("Red Sox tickets in Boston", config=config)
        assert prefs.sport == "Baseball"

    @patch("ticketmatch.chat.intent.Groq")
    def test_fallback_on_invalid_payload(self, mock_groq_cls):
        mock_groq_cls.return_value.chat.completions.create.return_value = _groq_reply({"people_count": 0})

        config = LLMConfig(api_key="test-key", enabled=True)
        prefs = extract_preferences_llm("Cowboys tickets for 3 people", config=config)
        assert prefs.sport == "Football"
        assert prefs.people_count == 3


# ── Assistant ────────────────────────────────────────────────────────────


class TestAssistant:
    @pytest.mark.parametrize(
        "message, reply",
        [
            ("hi there", GREETING_REPLY),
            ("Can you help me?", HELP_REPLY),
            ("thanks!", THANKS_REPLY),
            ("what's the weather like", HINT_REPLY),
        ],
    )
    def test_canned_replies(self, linear_engine, message, reply):
        response, state = Assistant(linear_engine, RULES_ONLY).respond(message)
        assert response.type == ChatResponseType.message
        assert response.message == reply
        assert response.recommendations == []
        assert len(state.turns) == 2

    def test_ticket_request_returns_results(self, linear_engine):
        assistant = Assistant(linear_engine, RULES_ONLY)
        response, state = assistant.respond("Show me VIP basketball tickets in New York for 4 people")

        assert response.type == ChatResponseType.results
        assert response.recommendations[0].package.id == "ny-vip"
        assert response.message.startswith(f"Perfect! I found {len(response.recommendations)} great options")
        assert "events in New York" in response.message
        assert state.preferences.people_count == 4
        assert state.last_results_ids == [p.id for p in response.suggested_packages]

    def test_follow_up_accumulates(self, linear_engine):
        assistant = Assistant(linear_engine, RULES_ONLY)
        _, state = assistant.respond("Show me basketball tickets in New York")
        response, state = assistant.respond("find club seats instead", state)

        assert response.preferences.location == "New York"
        assert response.preferences.sport == "Basketball"
        assert response.preferences.hospitality_type == "Club"

    def test_popular_fallback_on_empty_ranking(self, basketball_catalog):
        engine = MagicMock()
        engine.rank_query_detailed.return_value = RankedResults([], "linear")
        engine.vectors.packages = tuple(basketball_catalog)

        response, state = Assistant(engine, RULES_ONLY, k=1).respond("find me some tickets")
        assert response.type == ChatResponseType.popular
        assert response.message == POPULAR_REPLY
        assert response.recommendations == []
        assert [p.id for p in response.suggested_packages] == ["ny-vip"]
        assert state.last_results_ids == ["ny-vip"]


def test_contextual_reply_without_preferences():
    assert contextual_reply(3, UserPreferences()) == (
        "Great! I found 3 ticket packages that match what you're looking for:"
    )


def test_contextual_reply_lists_preferences():
    prefs = UserPreferences(location="New York", sport="Basketball", people_count=4, hospitality_type="VIP")
    assert contextual_reply(2, prefs) == (
        "Perfect! I found 2 great options for events in New York, basketball games, "
        "for 4 people, with VIP experience:"
    )
