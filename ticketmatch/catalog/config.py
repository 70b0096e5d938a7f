from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_BUNDLED_CATALOG = Path(__file__).resolve().parent.parent / "data" / "packages.csv"


@dataclass(frozen=True)
class CatalogConfig:
    catalog_path: Path = field(
        default_factory=lambda: Path(os.getenv("TICKETMATCH_CATALOG_PATH", str(_BUNDLED_CATALOG)))
    )


DEFAULT_CATALOG_CONFIG = CatalogConfig()
