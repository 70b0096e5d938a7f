"""
Compare the FAISS-backed path with the linear cosine scan.

Usage:
    python -m ticketmatch.recommendations.benchmark
"""
from __future__ import annotations

import time
from collections.abc import Sequence

import pandas as pd

from .engine import RankingEngine
from .service import build_engine

BENCHMARK_QUERIES = [
    "VIP basketball tickets in New York for 4 people",
    "Cheap baseball tickets near Boston",
    "Luxury football experience for corporate event",
    "Family-friendly hockey games this month",
    "Premium Lakers tickets with club access",
    "Budget-friendly Yankees tickets for 6 people",
    "Expensive Cowboys tickets with VIP treatment",
    "Celtics basketball games in premium seating",
]


def _time_query(engine: RankingEngine, query: str, k: int) -> tuple[float, int, str]:
    start = time.perf_counter()
    results, strategy = engine.rank_query_detailed(query, k)
    elapsed_ms = (time.perf_counter() - start) * 1000
    return elapsed_ms, len(results), strategy


def run_benchmarks(
    engine: RankingEngine,
    queries: Sequence[str] = BENCHMARK_QUERIES,
    k: int = 5,
) -> pd.DataFrame:
    """Time every query through the engine as configured and through a linear-only twin."""
    linear_engine = RankingEngine(engine.vectors, index=None, config=engine.config)

    records: list[dict] = []
    for query in queries:
        for label, target in (("configured", engine), ("linear", linear_engine)):
            elapsed_ms, count, strategy = _time_query(target, query, k)
            records.append({
                "query": query,
                "engine": label,
                "strategy": strategy,
                "search_time_ms": round(elapsed_ms, 3),
                "results": count,
            })
    return pd.DataFrame.from_records(records)


def summarise(results: pd.DataFrame) -> dict:
    averages = results.groupby("engine")["search_time_ms"].mean()
    configured = float(averages.get("configured", 0.0))
    linear = float(averages.get("linear", 0.0))
    return {
        "avg_configured_ms": round(configured, 3),
        "avg_linear_ms": round(linear, 3),
        "speedup": round(linear / configured, 2) if configured > 0 else None,
        "configured_strategies": sorted(
            results.loc[results["engine"] == "configured", "strategy"].dropna().unique().tolist()
        ),
    }


def main() -> None:
    engine = build_engine()
    status = engine.status()
    print(f"Catalog: {status.catalog_size} packages, dimension {status.dimension}, backend {status.index_type}")

    results = run_benchmarks(engine)
    print(results.to_string(index=False))
    print(summarise(results))


if __name__ == "__main__":
    main()
