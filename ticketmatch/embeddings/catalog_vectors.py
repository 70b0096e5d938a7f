from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import NamedTuple

import numpy as np

from ..catalog.models import TicketPackage
from .encoder import FeatureEncoder

logger = logging.getLogger(__name__)


class CatalogSnapshot(NamedTuple):
    packages: tuple[TicketPackage, ...]
    matrix: np.ndarray
    fallback_count: int


class CatalogVectors:
    """
    Per-catalog vector cache.

    Built once when the catalog is loaded and read-only afterwards, so any
    number of rank requests can share it without locking. ``rebuild`` swaps
    in a whole new snapshot when the catalog changes; readers holding the
    previous snapshot keep a consistent view.
    """

    def __init__(self, encoder: FeatureEncoder) -> None:
        self.encoder = encoder
        self._snapshot = CatalogSnapshot((), self._frozen(np.zeros((0, encoder.dimension))), 0)

    @staticmethod
    def _frozen(matrix: np.ndarray) -> np.ndarray:
        matrix = np.asarray(matrix, dtype=np.float64)
        matrix.setflags(write=False)
        return matrix

    @classmethod
    def from_catalog(
        cls,
        packages: Sequence[TicketPackage],
        encoder: FeatureEncoder | None = None,
    ) -> "CatalogVectors":
        cache = cls(encoder or FeatureEncoder())
        cache.build(packages)
        return cache

    def build(self, packages: Sequence[TicketPackage]) -> "CatalogVectors":
        packages = tuple(packages)
        rows: list[np.ndarray] = []
        fallback_count = 0
        for package in packages:
            encoded = self.encoder.encode_package_detailed(package)
            rows.append(encoded.vector)
            fallback_count += int(encoded.fallback)

        matrix = np.vstack(rows) if rows else np.zeros((0, self.encoder.dimension))
        self._snapshot = CatalogSnapshot(packages, self._frozen(matrix), fallback_count)

        if fallback_count:
            logger.warning("%d of %d packages use the fallback encoding", fallback_count, len(packages))
        logger.info("Encoded %d packages into %s vectors", len(packages), matrix.shape)
        return self

    def rebuild(self, packages: Sequence[TicketPackage]) -> "CatalogVectors":
        return self.build(packages)

    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def packages(self) -> tuple[TicketPackage, ...]:
        return self._snapshot.packages

    @property
    def matrix(self) -> np.ndarray:
        return self._snapshot.matrix

    @property
    def dimension(self) -> int:
        return self.encoder.dimension

    @property
    def fallback_count(self) -> int:
        return self._snapshot.fallback_count

    def __len__(self) -> int:
        return len(self._snapshot.packages)
