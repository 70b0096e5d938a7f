from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RankingConfig:
    # Vector-path results must score strictly above this (0-100 scale)
    min_score: int = 30
    default_k: int = 5
    # Neighbours requested from the index before thresholding and truncation
    index_candidates: int = 200
    # Bounded wait for the background index build before serving via the linear scan
    index_wait_seconds: float = 5.0


DEFAULT_RANKING_CONFIG = RankingConfig()
