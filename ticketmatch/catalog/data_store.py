from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from .config import DEFAULT_CATALOG_CONFIG
from .models import TicketPackage

logger = logging.getLogger(__name__)

CATALOG_COLUMNS: list[str] = [
    "id",
    "price",
    "venue",
    "date",
    "sport_type",
    "seating_category",
    "hospitality_type",
    "hospitality_venue",
    "hospitality_level",
    "location",
    "available_tickets",
    "description",
]


def _read_frame(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path, dtype="string")
    missing = [c for c in ("id", "price") if c not in df.columns]
    if missing:
        raise ValueError(f"catalog {path} is missing required columns: {missing}")

    df["price"] = pd.to_numeric(df["price"], errors="coerce")
    if "available_tickets" in df.columns:
        df["available_tickets"] = pd.to_numeric(df["available_tickets"], errors="coerce")
    return df


def _row_to_record(row: dict) -> dict:
    # Drop NaN/NA cells so model defaults apply
    record = {k: v for k, v in row.items() if k in CATALOG_COLUMNS and not pd.isna(v)}
    if "price" in record:
        record["price"] = float(record["price"])
    if "available_tickets" in record:
        record["available_tickets"] = int(record["available_tickets"])
    return record


def load_catalog(path: Path | None = None) -> list[TicketPackage]:
    """Load the ticket package catalog, skipping rows that fail validation."""
    path = path or DEFAULT_CATALOG_CONFIG.catalog_path
    df = _read_frame(path)

    packages: list[TicketPackage] = []
    for position, row in enumerate(df.to_dict(orient="records")):
        try:
            packages.append(TicketPackage(**_row_to_record(row)))
        except ValidationError:
            logger.warning("Skipping invalid catalog row %d in %s", position, path, exc_info=True)

    logger.info("Loaded %d ticket packages from %s", len(packages), path)
    return packages
