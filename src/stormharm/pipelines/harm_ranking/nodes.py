"""Tidy → ranking nodes: which event types do the most harm.

Architecture:
    aggregate → one groupby per context (overall, per year) + shares
    rank      → top-k rows per measure, sorted by the raw sum
    summarize → "worst for health" / "worst for economy" unions

Ranking is always by the absolute summed value; shares are only for
display and comparison.
"""

from __future__ import annotations

import logging

import pandas as pd

logger = logging.getLogger(__name__)

MEASURES: list[str] = ["injuries", "fatalities", "property_damage", "crop_damage"]

# Which measures feed each "worst" union
_WORST_GROUPS: dict[str, tuple[str, str]] = {
    "health": ("injuries", "fatalities"),
    "economy": ("property_damage", "crop_damage"),
}

_RANKING_COLUMNS: list[str] = ["measure", "rank", "category", "value", "share"]


# ── helpers ─────────────────────────────────────────────────────
def _aggregate(tidy: pd.DataFrame, keys: list[str]) -> pd.DataFrame:
    return tidy.groupby(keys, as_index=False, sort=True).agg(
        count=("timestamp", "size"),
        injuries=("injuries", "sum"),
        fatalities=("fatalities", "sum"),
        property_damage=("property_damage", "sum"),
        crop_damage=("crop_damage", "sum"),
    )


def add_shares(agg: pd.DataFrame, by: str | None = None) -> pd.DataFrame:
    """Add ``<measure>_share`` columns: value / total within the context.

    With ``by=None`` the context is the whole table; otherwise each
    distinct value of ``by`` (e.g. year) is its own context. A context
    whose total is zero gets a share of 0.0 on every row.
    """
    agg = agg.copy()
    for col in ["count", *MEASURES]:
        if by is None:
            totals = pd.Series(agg[col].sum(), index=agg.index)
        else:
            totals = agg.groupby(by)[col].transform("sum")
        agg[f"{col}_share"] = agg[col].div(totals).where(totals != 0, 0.0)
    return agg


def _top_k(agg: pd.DataFrame, measure: str, k: int) -> pd.DataFrame:
    """First k rows by ``measure`` descending; ties keep input order."""
    top = agg.sort_values(measure, ascending=False, kind="mergesort").head(k)
    return pd.DataFrame(
        {
            "measure": measure,
            "rank": range(1, len(top) + 1),
            "category": top["category"].to_numpy(),
            "value": top[measure].to_numpy(),
            "share": top[f"{measure}_share"].to_numpy(),
        },
        columns=_RANKING_COLUMNS,
    )


def _check_k(k: int) -> None:
    if k < 1:
        raise ValueError(f"top-k size must be at least 1, got {k}")


def _union(rankings: pd.DataFrame, measures: tuple[str, ...]) -> list[str]:
    selected = rankings[rankings["measure"].isin(measures)]
    return sorted(set(selected["category"]))


# ── Node 1 ──────────────────────────────────────────────────────
def aggregate_overall(storm_events_tidy: pd.DataFrame) -> pd.DataFrame:
    """Sum events and harm per category across all years.

    Args:
        storm_events_tidy: Tidy event table.

    Returns:
        One row per category with count, the four summed measures and
        their shares of the grand total.
    """
    agg = add_shares(_aggregate(storm_events_tidy, ["category"]))
    logger.info(
        "Aggregated %s events into %d categories",
        f"{len(storm_events_tidy):,}",
        len(agg),
    )
    return agg


# ── Node 2 ──────────────────────────────────────────────────────
def aggregate_by_year(storm_events_tidy: pd.DataFrame) -> pd.DataFrame:
    """Sum events and harm per (category, year).

    The year is taken from the UTC timestamp. Shares are relative to
    the total for the same year.
    """
    tidy = storm_events_tidy.copy()
    tidy["year"] = pd.to_datetime(tidy["timestamp"], utc=True).dt.year

    agg = add_shares(_aggregate(tidy, ["category", "year"]), by="year")
    agg = agg[["year", *[c for c in agg.columns if c != "year"]]]
    agg = agg.sort_values(["year", "category"], kind="mergesort").reset_index(drop=True)

    if len(agg):
        logger.info(
            "Aggregated to %s category-year rows (years %d–%d)",
            f"{len(agg):,}",
            agg["year"].min(),
            agg["year"].max(),
        )
    return agg


# ── Node 3 ──────────────────────────────────────────────────────
def rank_overall(harm_overall: pd.DataFrame, k: int) -> pd.DataFrame:
    """Top-k categories per measure across all years.

    Args:
        harm_overall: Output of aggregate_overall.
        k: Number of categories to keep per measure.

    Returns:
        Long table with columns measure, rank, category, value, share.
    """
    _check_k(k)
    rankings = pd.concat(
        [_top_k(harm_overall, measure, k) for measure in MEASURES],
        ignore_index=True,
    )
    for measure in MEASURES:
        top = rankings.loc[rankings["measure"] == measure, "category"].tolist()
        logger.info("Top %d by %s: %s", k, measure, top)
    return rankings


# ── Node 4 ──────────────────────────────────────────────────────
def rank_by_year(harm_by_year: pd.DataFrame, k: int) -> pd.DataFrame:
    """Top-k categories per measure within each year.

    Returns:
        Long table with columns year, measure, rank, category, value, share.
    """
    _check_k(k)
    frames: list[pd.DataFrame] = []
    for year, group in harm_by_year.groupby("year", sort=True):
        for measure in MEASURES:
            top = _top_k(group, measure, k)
            top.insert(0, "year", year)
            frames.append(top)

    if not frames:
        return pd.DataFrame(columns=["year", *_RANKING_COLUMNS])

    rankings = pd.concat(frames, ignore_index=True)
    logger.info(
        "Ranked top %d per measure for %d years",
        k,
        rankings["year"].nunique(),
    )
    return rankings


# ── Node 5 ──────────────────────────────────────────────────────
def worst_categories(top_overall: pd.DataFrame) -> dict[str, list[str]]:
    """Union the overall rankings into "worst for health / economy".

    health  = top injuries ∪ top fatalities
    economy = top property damage ∪ top crop damage
    """
    worst = {group: _union(top_overall, measures) for group, measures in _WORST_GROUPS.items()}
    logger.info("Worst for health: %s", worst["health"])
    logger.info("Worst for economy: %s", worst["economy"])
    return worst


# ── Node 6 ──────────────────────────────────────────────────────
def worst_categories_by_year(top_by_year: pd.DataFrame) -> dict[str, dict[str, list[str]]]:
    """Same unions as worst_categories, computed for every year.

    Keys are year strings so the result serialises straight to JSON.
    """
    return {
        str(year): {
            group: _union(rankings, measures)
            for group, measures in _WORST_GROUPS.items()
        }
        for year, rankings in top_by_year.groupby("year", sort=True)
    }
