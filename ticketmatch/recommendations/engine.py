from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import NamedTuple

from ..catalog.models import RecommendationScore, TicketPackage, UserPreferences
from ..embeddings.catalog_vectors import CatalogSnapshot, CatalogVectors
from ..embeddings.encoder import FeatureEncoder
from .attribute_matcher import match_preferences
from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .errors import InvalidInputError, check_k
from .index import FaissIndex
from .models import EngineStatus
from .reasons import vector_match_reasons
from .strategies import AttributeStrategy, IndexStrategy, LinearScanStrategy, VectorStrategy

logger = logging.getLogger(__name__)


class RankedResults(NamedTuple):
    recommendations: list[RecommendationScore]
    strategy: str


class RankingEngine:
    """
    Turns a query string or a preference set into a top-K recommendation list.

    Structured preferences go to the attribute matcher. Query strings are
    encoded once and scored by the FAISS index when it is ready, otherwise
    (or when the index errors) by a linear cosine scan over the cached
    catalog vectors. The ``*_detailed`` variants return the strategy that
    served each call alongside its results; ``last_strategy`` only feeds
    ``status()``.
    """

    def __init__(
        self,
        vectors: CatalogVectors,
        index: FaissIndex | None = None,
        config: RankingConfig = DEFAULT_RANKING_CONFIG,
    ) -> None:
        self.vectors = vectors
        self.index = index
        self.config = config
        self.attribute = AttributeStrategy()
        self.linear = LinearScanStrategy()
        self.indexed = IndexStrategy(index, config.index_candidates) if index is not None else None
        self.last_strategy: str | None = None

    @property
    def encoder(self) -> FeatureEncoder:
        return self.vectors.encoder

    def rank(
        self,
        query_or_prefs: str | UserPreferences,
        k: int | None = None,
    ) -> list[RecommendationScore]:
        return self.rank_detailed(query_or_prefs, k).recommendations

    def rank_detailed(
        self,
        query_or_prefs: str | UserPreferences,
        k: int | None = None,
    ) -> RankedResults:
        k = check_k(self.config.default_k if k is None else k)
        if isinstance(query_or_prefs, UserPreferences):
            return self.rank_preferences_detailed(query_or_prefs, k)
        if isinstance(query_or_prefs, str):
            return self.rank_query_detailed(query_or_prefs, k)
        raise InvalidInputError(
            f"expected a query string or UserPreferences, got {type(query_or_prefs).__name__}"
        )

    def rank_preferences(self, preferences: UserPreferences, k: int) -> list[RecommendationScore]:
        return self.rank_preferences_detailed(preferences, k).recommendations

    def rank_preferences_detailed(self, preferences: UserPreferences, k: int) -> RankedResults:
        snapshot = self.vectors.snapshot()
        results = self.attribute.rank(preferences, snapshot, check_k(k))
        return self._served(RankedResults(results, self.attribute.name))

    def rank_query(self, query: str, k: int) -> list[RecommendationScore]:
        return self.rank_query_detailed(query, k).recommendations

    def rank_query_detailed(self, query: str, k: int) -> RankedResults:
        k = check_k(k)
        if not isinstance(query, str):
            raise InvalidInputError(f"expected a query string, got {type(query).__name__}")

        snapshot = self.vectors.snapshot()
        if k == 0 or not snapshot.packages:
            return self._served(RankedResults([], self.linear.name))

        query_vector = self.encoder.encode_query(query)

        strategy: VectorStrategy = self.linear
        candidates: list[tuple[int, int]] | None = None
        if self.indexed is not None and self.indexed.is_available():
            try:
                candidates = self.indexed.candidates(query_vector, snapshot, k)
                strategy = self.indexed
            except Exception:
                logger.warning("Index search failed, falling back to linear scan", exc_info=True)
        if candidates is None:
            candidates = self.linear.candidates(query_vector, snapshot, k)

        return self._served(RankedResults(self._finalise(query, snapshot, candidates, k), strategy.name))

    def _served(self, ranked: RankedResults) -> RankedResults:
        # Status only; callers read the strategy from the returned tuple
        self.last_strategy = ranked.strategy
        return ranked

    def _finalise(
        self,
        query: str,
        snapshot: CatalogSnapshot,
        candidates: list[tuple[int, int]],
        k: int,
    ) -> list[RecommendationScore]:
        passing = [(pos, score) for pos, score in candidates if score > self.config.min_score]
        # Ties fall back to catalog order, whichever strategy produced them
        passing.sort(key=lambda item: (-item[1], item[0]))

        results: list[RecommendationScore] = []
        for position, score in passing[:k]:
            package = snapshot.packages[position]
            results.append(
                RecommendationScore(
                    package=package,
                    score=score,
                    reasons=vector_match_reasons(query, package, score),
                )
            )
        return results

    def status(self) -> EngineStatus:
        index_active = self.index is not None and self.index.ready
        return EngineStatus(
            index_active=index_active,
            index_type=FaissIndex.index_type if index_active else "Fallback Cosine Similarity",
            catalog_size=len(self.vectors),
            dimension=self.vectors.dimension,
            last_strategy=self.last_strategy,
            fallback_encodings=self.vectors.fallback_count,
        )


def rank(
    query_or_prefs: str | UserPreferences,
    catalog: Sequence[TicketPackage],
    k: int = 5,
) -> list[RecommendationScore]:
    """One-off ranking over ``catalog`` without an index; builds a throwaway vector cache."""
    if isinstance(query_or_prefs, UserPreferences):
        return match_preferences(query_or_prefs, catalog, k)
    if not isinstance(query_or_prefs, str):
        raise InvalidInputError(
            f"expected a query string or UserPreferences, got {type(query_or_prefs).__name__}"
        )
    return RankingEngine(CatalogVectors.from_catalog(catalog)).rank(query_or_prefs, k)
