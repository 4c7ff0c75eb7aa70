"""FastAPI application serving storm harm rankings.

The batch path is the Kedro ``harm_ranking`` pipeline that writes CSV
and JSON files. This app reads the tidy table the ``data_processing``
pipeline persisted and runs the same ranking nodes in memory, so both
paths give identical answers.

Run locally:
    uvicorn stormharm.api:app --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Literal

import numpy as np
import pandas as pd
from fastapi import FastAPI, HTTPException, Query

from stormharm import __version__
from stormharm.pipelines.harm_ranking.nodes import (
    aggregate_by_year,
    aggregate_overall,
    rank_by_year,
    rank_overall,
    worst_categories,
)

logger = logging.getLogger(__name__)

# ── Configuration ────────────────────────────────────────────────
# Relative to the project root (where uvicorn is launched).
TIDY_PATH = Path("data/03_primary/storm_events_tidy.csv")
DEFAULT_K_OVERALL = 5
DEFAULT_K_YEARLY = 2

Measure = Literal["injuries", "fatalities", "property_damage", "crop_damage"]

# Populated at startup, read at request time.
_state: dict = {}


# ── Helpers ──────────────────────────────────────────────────────
def _ranking_records(rankings: pd.DataFrame, measure: str | None = None) -> list[dict]:
    """Turn a long ranking table into JSON-ready dicts.

    numpy scalars are converted to plain Python numbers.
    """
    if measure is not None:
        rankings = rankings[rankings["measure"] == measure]
    records = []
    for row in rankings.to_dict(orient="records"):
        records.append(
            {
                key: value.item() if isinstance(value, np.generic) else value
                for key, value in row.items()
            }
        )
    return records


# ── Lifespan (startup / shutdown) ────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the tidy table and aggregate it once at startup."""
    logger.info("Loading tidy events from %s", TIDY_PATH)
    tidy = pd.read_csv(TIDY_PATH)

    _state["harm_overall"] = aggregate_overall(tidy)
    _state["harm_by_year"] = aggregate_by_year(tidy)

    logger.info(
        "API ready — %d events, %d categories, %d years",
        len(tidy),
        len(_state["harm_overall"]),
        _state["harm_by_year"]["year"].nunique(),
    )

    yield

    logger.info("Shutting down API")


# ── App ──────────────────────────────────────────────────────────
app = FastAPI(
    title="Storm Harm Rankings",
    description=(
        "Which severe-weather event types cause the most injuries, "
        "fatalities, property damage and crop damage in NOAA Storm Data, "
        "overall and year by year."
    ),
    version=__version__,
    lifespan=lifespan,
)


# ── Endpoints ────────────────────────────────────────────────────
# /rankings/overall is defined BEFORE /rankings/{year}. Routes match
# top-to-bottom, and "overall" would otherwise hit the year route and
# fail integer validation with a 422.


@app.get("/health")
async def health_check():
    """Liveness probe."""
    return {"status": "healthy"}


@app.get("/rankings/overall")
async def rankings_overall(
    measure: Measure | None = Query(default=None, description="Only this measure"),
    k: int = Query(default=DEFAULT_K_OVERALL, ge=1, le=48),
):
    """Top-k event types per measure across all years."""
    rankings = rank_overall(_state["harm_overall"], k)
    return {"k": k, "rankings": _ranking_records(rankings, measure)}


@app.get("/rankings/{year}")
async def rankings_for_year(
    year: int,
    measure: Measure | None = Query(default=None, description="Only this measure"),
    k: int = Query(default=DEFAULT_K_YEARLY, ge=1, le=48),
):
    """Top-k event types per measure within one year."""
    by_year = _state["harm_by_year"]
    if year not in set(by_year["year"]):
        raise HTTPException(
            status_code=404,
            detail=(
                f"No events for year {year}. "
                f"Available: {int(by_year['year'].min())}–{int(by_year['year'].max())}."
            ),
        )

    rankings = rank_by_year(by_year[by_year["year"] == year], k)
    return {"year": year, "k": k, "rankings": _ranking_records(rankings, measure)}


@app.get("/worst")
async def worst(k: int = Query(default=DEFAULT_K_OVERALL, ge=1, le=48)):
    """Event types in the overall top-k for health and for the economy."""
    return worst_categories(rank_overall(_state["harm_overall"], k))
