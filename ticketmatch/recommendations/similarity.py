from __future__ import annotations

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity


def cosine(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity in [-1, 1]; 0.0 for mismatched lengths or zero vectors."""
    a = np.asarray(a, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    if a.shape != b.shape:
        return 0.0

    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.clip(np.dot(a, b) / (norm_a * norm_b), -1.0, 1.0))


def cosine_to_matrix(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Score one query vector against every row of ``matrix``."""
    query = np.asarray(query, dtype=np.float64).reshape(1, -1)
    if matrix.ndim != 2 or matrix.shape[0] == 0:
        return np.zeros(0)
    if matrix.shape[1] != query.shape[1]:
        return np.zeros(matrix.shape[0])
    # Zero rows normalise to zero, so their similarity is 0 rather than NaN
    return np.clip(cosine_similarity(query, matrix).ravel(), -1.0, 1.0)


def to_percent(similarity: float) -> int:
    return int(round(max(0.0, float(similarity)) * 100))
