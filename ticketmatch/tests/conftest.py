from datetime import date

import pytest

from ticketmatch.catalog.models import TicketPackage
from ticketmatch.embeddings.catalog_vectors import CatalogVectors
from ticketmatch.embeddings.encoder import FeatureEncoder
from ticketmatch.recommendations.engine import RankingEngine

REFERENCE_DAY = date(2026, 10, 19)


def _package(**overrides) -> TicketPackage:
    fields = {
        "id": "pkg-test",
        "price": 200.0,
        "venue": "Test Arena",
        "date": "2026-11-14",
        "sport_type": "Basketball",
        "seating_category": "Lower Bowl",
        "hospitality_type": "Standard Entry",
        "hospitality_venue": "Concourse",
        "hospitality_level": "Silver",
        "location": "Chicago",
        "available_tickets": 20,
        "description": "",
    }
    fields.update(overrides)
    return TicketPackage(**fields)


@pytest.fixture
def make_package():
    return _package


@pytest.fixture
def encoder():
    return FeatureEncoder(today=REFERENCE_DAY)


@pytest.fixture
def basketball_catalog():
    return [
        _package(
            id="ny-vip",
            location="New York",
            sport_type="Basketball",
            price=450,
            hospitality_level="Platinum",
            hospitality_type="VIP Lounge Access",
            venue="Madison Square Garden",
            seating_category="Courtside",
            available_tickets=8,
        ),
        _package(
            id="la-club",
            location="Los Angeles",
            sport_type="Basketball",
            price=280,
            hospitality_level="Gold",
            hospitality_type="Club Access",
            venue="Crypto.com Arena",
            date="2026-11-21",
            available_tickets=12,
        ),
    ]


@pytest.fixture
def linear_engine(basketball_catalog, encoder):
    return RankingEngine(CatalogVectors.from_catalog(basketball_catalog, encoder))
