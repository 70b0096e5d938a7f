"""
Optional FAISS-backed nearest-neighbour index over the catalog vectors.

Vectors are L2-normalised before they go into an ``IndexFlatIP``, so inner
product equals cosine similarity and the index agrees with the linear scan.
The build can run on a background thread; callers check ``ready`` (or wait
a bounded time) and use the linear scan until then.
"""
from __future__ import annotations

import logging
import threading
import time

import numpy as np

from .errors import IndexUnavailableError

logger = logging.getLogger(__name__)

try:
    import faiss
    _HAS_FAISS = True
except ImportError:
    _HAS_FAISS = False


def faiss_available() -> bool:
    return _HAS_FAISS


def _normalise(vectors: np.ndarray) -> np.ndarray:
    vectors = np.ascontiguousarray(vectors, dtype=np.float32)
    norms = np.linalg.norm(vectors, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return np.ascontiguousarray(vectors / norms, dtype=np.float32)


class FaissIndex:
    index_type = "FAISS IndexFlatIP"

    def __init__(self) -> None:
        self._index = None
        self._ready = threading.Event()
        self._thread: threading.Thread | None = None
        self.last_error: Exception | None = None

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    @property
    def size(self) -> int:
        return int(self._index.ntotal) if self._index is not None else 0

    def build(self, vectors: np.ndarray) -> "FaissIndex":
        """Build synchronously. Raises when faiss is missing or the vectors are unusable."""
        if not _HAS_FAISS:
            raise IndexUnavailableError("faiss is not installed")

        vectors = np.asarray(vectors)
        if vectors.ndim != 2 or vectors.shape[0] == 0:
            raise IndexUnavailableError("no vectors to index")

        start = time.perf_counter()
        index = faiss.IndexFlatIP(vectors.shape[1])
        index.add(_normalise(vectors))

        self._index = index
        self._ready.set()
        logger.info(
            "Built %s with %d vectors in %.1f ms",
            self.index_type, index.ntotal, (time.perf_counter() - start) * 1000,
        )
        return self

    def build_async(self, vectors: np.ndarray) -> threading.Thread:
        """Start a best-effort build on a daemon thread and return immediately."""

        def _run() -> None:
            try:
                self.build(vectors)
            except Exception as exc:
                self.last_error = exc
                logger.warning("Index build failed, falling back to linear scan", exc_info=True)

        self._ready.clear()
        self._thread = threading.Thread(target=_run, name="faiss-index-build", daemon=True)
        self._thread.start()
        return self._thread

    def wait_until_ready(self, timeout: float) -> bool:
        """Wait at most ``timeout`` seconds; returns whether the index is ready."""
        if self._ready.wait(timeout=max(0.0, timeout)):
            return True
        logger.warning("Index not ready after %.1f s, proceeding with fallback", timeout)
        return False

    def search(self, query: np.ndarray, k: int) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(labels, distances)`` for the ``k`` nearest catalog rows."""
        if not self.ready or self._index is None:
            raise IndexUnavailableError("index is not ready")

        query = np.asarray(query)
        if query.ndim != 1 or query.shape[0] != self._index.d:
            raise IndexUnavailableError(
                f"query dimension {query.shape} does not match index dimension {self._index.d}"
            )

        distances, labels = self._index.search(_normalise(query.reshape(1, -1)), k)
        return labels[0], distances[0]
