"""
Interchangeable scoring strategies used by the ranking engine.

Vector strategies return ``(catalog position, 0-100 score)`` candidates and
leave thresholding, ordering and truncation to the engine, so the index and
the linear scan go through exactly the same post-processing.
"""
from __future__ import annotations

from typing import Protocol

import numpy as np

from ..catalog.models import RecommendationScore, UserPreferences
from ..embeddings.catalog_vectors import CatalogSnapshot
from .attribute_matcher import match_preferences
from .index import FaissIndex
from .similarity import cosine_to_matrix, to_percent


class VectorStrategy(Protocol):
    name: str

    def is_available(self) -> bool: ...

    def candidates(
        self, query_vector: np.ndarray, snapshot: CatalogSnapshot, k: int
    ) -> list[tuple[int, int]]: ...


class LinearScanStrategy:
    name = "linear"

    def is_available(self) -> bool:
        return True

    def candidates(
        self, query_vector: np.ndarray, snapshot: CatalogSnapshot, k: int
    ) -> list[tuple[int, int]]:
        similarities = cosine_to_matrix(query_vector, snapshot.matrix)
        return [(position, to_percent(sim)) for position, sim in enumerate(similarities)]


class IndexStrategy:
    name = "index"

    def __init__(self, index: FaissIndex, candidates: int = 200) -> None:
        self.index = index
        self.candidates_wanted = candidates

    def is_available(self) -> bool:
        return self.index.ready

    def candidates(
        self, query_vector: np.ndarray, snapshot: CatalogSnapshot, k: int
    ) -> list[tuple[int, int]]:
        if self.index.size != len(snapshot.packages):
            raise RuntimeError(
                f"index holds {self.index.size} vectors but the catalog has {len(snapshot.packages)}"
            )
        # Over-fetch; threshold, tie order and truncation happen in the engine
        wanted = min(self.index.size, max(k, self.candidates_wanted))
        labels, distances = self.index.search(query_vector, wanted)
        # faiss pads missing neighbours with label -1
        return [
            (int(label), to_percent(distance))
            for label, distance in zip(labels, distances)
            if 0 <= label < len(snapshot.packages)
        ]


class AttributeStrategy:
    name = "attribute"

    def rank(
        self, preferences: UserPreferences, snapshot: CatalogSnapshot, k: int
    ) -> list[RecommendationScore]:
        return match_preferences(preferences, snapshot.packages, k)
