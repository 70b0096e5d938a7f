from __future__ import annotations

import hashlib
import logging
import math
from datetime import date
from typing import NamedTuple

import numpy as np

from ..catalog.models import TicketPackage
from ..recommendations.errors import InvalidInputError
from . import features as f
from .config import DEFAULT_ENCODER_CONFIG, EncoderConfig

logger = logging.getLogger(__name__)


class EncodedVector(NamedTuple):
    vector: np.ndarray
    fallback: bool


def _stable_seed(key: str) -> int:
    return int(hashlib.sha256(key.encode("utf-8")).hexdigest()[:16], 16)


class FeatureEncoder:
    """
    Deterministic rule-based encoder for packages and free-text queries.

    Both sides emit the same block layout (location, sport, price,
    hospitality, venue, date, availability, text keywords, seating), then
    get zero padded or truncated to ``config.dimension``. The date block is
    relative to ``today``, fixed when the encoder is built.
    """

    def __init__(
        self,
        config: EncoderConfig = DEFAULT_ENCODER_CONFIG,
        today: date | None = None,
    ) -> None:
        self.config = config
        self.today = today or date.today()

    @property
    def dimension(self) -> int:
        return self.config.dimension

    def encode(self, record_or_query: TicketPackage | str) -> np.ndarray:
        if isinstance(record_or_query, TicketPackage):
            return self.encode_package(record_or_query)
        if isinstance(record_or_query, str):
            return self.encode_query(record_or_query)
        raise InvalidInputError(
            f"expected a TicketPackage or a query string, got {type(record_or_query).__name__}"
        )

    # -- packages ----------------------------------------------------------

    def encode_package(self, package: TicketPackage) -> np.ndarray:
        return self.encode_package_detailed(package).vector

    def encode_package_detailed(self, package: TicketPackage) -> EncodedVector:
        if not isinstance(package, TicketPackage):
            raise InvalidInputError(f"expected a TicketPackage, got {type(package).__name__}")
        try:
            return EncodedVector(self._fit(self._package_features(package)), False)
        except Exception:
            logger.warning("Full encoding failed for package %s, using fallback", package.id, exc_info=True)
            return EncodedVector(self.fallback_package(package), True)

    def _package_features(self, package: TicketPackage) -> list[float]:
        return [
            *f.location_block(package.location),
            *f.sport_block(package.sport_type),
            *f.price_block(package.price, self.config),
            *f.hospitality_block(package.hospitality_level, package.hospitality_type),
            *f.venue_block(package.venue),
            *f.date_block(package.date, self.today),
            *f.availability_block(package.available_tickets),
            *f.keyword_block(package.description),
            *f.seating_block(package.seating_category),
        ]

    def fallback_package(self, package: TicketPackage) -> np.ndarray:
        return self._fallback(
            package.location,
            package.sport_type,
            min(package.price / self.config.price_ceiling, 1.0) if math.isfinite(package.price) else 0.0,
            f.hospitality_level_score(package.hospitality_level),
            seed_key=f"package:{package.id}",
        )

    # -- queries -----------------------------------------------------------

    def encode_query(self, query: str) -> np.ndarray:
        if not isinstance(query, str):
            raise InvalidInputError(f"expected a query string, got {type(query).__name__}")
        try:
            return self._fit(self._query_features(query))
        except Exception:
            logger.warning("Full encoding failed for query %r, using fallback", query, exc_info=True)
            return self.fallback_query(query)

    def _query_features(self, query: str) -> list[float]:
        return [
            *f.location_block(query),
            *f.sport_block(query),
            *f.query_price_block(query, self.config),
            *f.query_hospitality_block(query),
            *f.venue_block(query),
            *f.query_date_block(query, self.today),
            *f.query_availability_block(query),
            *f.keyword_block(query),
            *f.seating_block(query),
        ]

    def fallback_query(self, query: str) -> np.ndarray:
        return self._fallback(
            query,
            query,
            f.query_price_block(query, self.config)[0],
            f.query_hospitality_block(query)[0],
            seed_key=f"query:{query}",
        )

    # -- helpers -----------------------------------------------------------

    def _fallback(
        self,
        location: str,
        sport: str,
        price_fraction: float,
        level: float,
        seed_key: str,
    ) -> np.ndarray:
        basic = [
            *f.basic_location_block(location),
            *f.basic_sport_block(sport),
            price_fraction,
            level,
        ][: self.dimension]
        rng = np.random.default_rng(_stable_seed(seed_key))
        noise = rng.uniform(0.0, self.config.fallback_noise, size=self.dimension - len(basic))
        return np.concatenate([np.asarray(basic, dtype=np.float64), noise])

    def _fit(self, values: list[float]) -> np.ndarray:
        vector = np.zeros(self.dimension, dtype=np.float64)
        width = min(len(values), self.dimension)
        vector[:width] = values[:width]
        return vector

