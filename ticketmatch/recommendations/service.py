from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from ..catalog.data_store import load_catalog
from ..catalog.models import TicketPackage
from ..embeddings.catalog_vectors import CatalogVectors
from ..embeddings.config import DEFAULT_ENCODER_CONFIG, EncoderConfig
from ..embeddings.encoder import FeatureEncoder
from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .engine import RankingEngine
from .index import FaissIndex, faiss_available

logger = logging.getLogger(__name__)


def build_engine(
    packages: Sequence[TicketPackage] | None = None,
    *,
    catalog_path: Path | None = None,
    use_index: bool = True,
    wait_for_index: bool = True,
    encoder_config: EncoderConfig = DEFAULT_ENCODER_CONFIG,
    ranking_config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> RankingEngine:
    """
    Load the catalog, encode it once and wire up the ranking engine.

    The FAISS index (when requested and installed) builds on a background
    thread. With ``wait_for_index`` the call waits at most
    ``ranking_config.index_wait_seconds`` for it; either way the engine is
    usable immediately through the linear scan.
    """
    if packages is None:
        packages = load_catalog(catalog_path)

    vectors = CatalogVectors.from_catalog(packages, FeatureEncoder(encoder_config))

    index: FaissIndex | None = None
    if use_index and faiss_available() and len(vectors):
        index = FaissIndex()
        index.build_async(vectors.matrix)
        if wait_for_index:
            index.wait_until_ready(ranking_config.index_wait_seconds)
    elif use_index:
        logger.info("FAISS index unavailable, serving with linear cosine scan")

    return RankingEngine(vectors, index=index, config=ranking_config)
