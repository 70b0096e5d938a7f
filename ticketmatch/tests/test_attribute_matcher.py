import pytest

from ticketmatch.catalog.models import BudgetRange, UserPreferences
from ticketmatch.recommendations.attribute_matcher import match_preferences, score_package
from ticketmatch.recommendations.errors import InvalidInputError


def test_no_matching_sport_gives_empty_result(basketball_catalog):
    prefs = UserPreferences(sport="Baseball")
    assert match_preferences(prefs, basketball_catalog) == []


def test_cheaper_item_outranks_over_budget_item(make_package):
    catalog = [make_package(id="pricey", price=900), make_package(id="cheap", price=100)]
    prefs = UserPreferences(budget=BudgetRange(min=0, max=200))
    results = match_preferences(prefs, catalog)
    assert results[0].package.id == "cheap"
    assert "pricey" not in [r.package.id for r in results]


def test_budget_rule_ordering(make_package):
    """Within budget beats under budget, which beats over budget."""
    catalog = [
        make_package(id="over", price=300),
        make_package(id="under", price=50),
        make_package(id="within", price=150),
    ]
    prefs = UserPreferences(sport="Basketball", budget=BudgetRange(min=100, max=200))
    results = match_preferences(prefs, catalog)
    assert [r.package.id for r in results] == ["within", "under", "over"]
    assert [r.score for r in results] == [45, 35, 25]
    assert "Within your budget at $150" in results[0].reasons
    assert "Under your budget at $50" in results[1].reasons


def test_location_match_is_case_insensitive(make_package):
    score, reasons = score_package(make_package(location="New York"), UserPreferences(location="new york"))
    assert score == 30
    assert reasons == ["Matches your location preference: New York"]


class TestDateScoring:
    def test_same_day(self, make_package):
        score, reasons = score_package(make_package(date="2026-11-14"), UserPreferences(date="2026-11-14"))
        assert score == 15
        assert reasons == ["On your preferred date"]

    def test_scaled_inside_window(self, make_package):
        score, reasons = score_package(make_package(date="2026-11-20"), UserPreferences(date="2026-11-14"))
        assert score == 12
        assert reasons == ["Within 6 days of your preferred date"]

    def test_outside_window(self, make_package):
        score, _ = score_package(make_package(date="2027-01-20"), UserPreferences(date="2026-11-14"))
        assert score == 0

    def test_evening_event_counts_as_same_day(self, make_package):
        score, reasons = score_package(make_package(date="2026-11-14T19:30"), UserPreferences(date="2026-11-14"))
        assert score == 15
        assert reasons == ["On your preferred date"]

    def test_time_of_day_counts_as_fractional_days(self, make_package):
        # 6.5 days apart
        score, reasons = score_package(make_package(date="2026-11-20T12:00"), UserPreferences(date="2026-11-14"))
        assert score == 12
        assert reasons == ["Within 7 days of your preferred date"]

    def test_time_of_day_can_push_past_window(self, make_package):
        score, reasons = score_package(make_package(date="2026-12-14T12:00"), UserPreferences(date="2026-11-14"))
        assert score == 0
        assert reasons == []

    def test_unparseable_package_date_is_ignored(self, make_package):
        score, _ = score_package(make_package(date="soon"), UserPreferences(date="2026-11-14"))
        assert score == 0


def test_party_size_needs_enough_tickets(make_package):
    prefs = UserPreferences(people_count=10)
    assert score_package(make_package(available_tickets=8), prefs)[0] == 0
    assert score_package(make_package(available_tickets=12), prefs)[0] == 10


def test_scores_are_capped_but_keep_raw_order(make_package):
    everything = dict(
        location="New York",
        sport_type="Basketball",
        hospitality_type="VIP Lounge Access",
        date="2026-11-14",
        available_tickets=8,
    )
    catalog = [
        make_package(id="under-budget", price=50, **everything),  # raw 110
        make_package(id="within-budget", price=450, **everything),  # raw 120
    ]
    prefs = UserPreferences(
        location="New York",
        sport="basketball",
        hospitality_type="vip",
        date="2026-11-14",
        people_count=4,
        budget=BudgetRange(min=100, max=500),
    )
    results = match_preferences(prefs, catalog)
    assert [r.package.id for r in results] == ["within-budget", "under-budget"]
    assert [r.score for r in results] == [100, 100]
    assert len(results[0].reasons) == 6


def test_ties_keep_catalog_order(make_package):
    catalog = [make_package(id=f"pkg-{i}") for i in range(4)]
    results = match_preferences(UserPreferences(sport="Basketball"), catalog, k=3)
    assert [r.package.id for r in results] == ["pkg-0", "pkg-1", "pkg-2"]


def test_k_zero(basketball_catalog):
    assert match_preferences(UserPreferences(sport="Basketball"), basketball_catalog, k=0) == []


def test_rejects_bad_input(basketball_catalog):
    with pytest.raises(InvalidInputError):
        match_preferences({"sport": "Basketball"}, basketball_catalog)
    with pytest.raises(InvalidInputError):
        match_preferences(UserPreferences(), basketball_catalog, k=-1)
