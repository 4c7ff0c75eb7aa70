"""Exploratory nodes for choosing the cutoff year.

The EVTYPE field went through years of free-text churn before NOAA
standardised on 48 event types. These nodes show that churn (when each
raw label first and last appears, how many distinct labels each year
has) and check the configured cutoff year against it. Nothing in the
data_processing pipeline depends on them at run time.
"""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from stormharm.pipelines.data_processing.lookups import EVENT_CATEGORIES

logger = logging.getLogger(__name__)


# ── Node 1 ──────────────────────────────────────────────────────
def extract_event_years(storm_events_selected: pd.DataFrame) -> pd.DataFrame:
    """Pair every raw label with the calendar year of its BGN_DATE.

    Uses the local calendar date only, so no row is lost to timezone
    or time-of-day problems. Labels are stripped and upper-cased, the
    same way map_event_categories looks them up.
    """
    years = pd.to_datetime(
        storm_events_selected["BGN_DATE"].astype(str).str.split().str[0],
        format="%m/%d/%Y",
        errors="coerce",
    ).dt.year

    event_years = pd.DataFrame(
        {
            "label": storm_events_selected["EVTYPE"].astype(str).str.strip().str.upper(),
            "year": years,
        }
    ).dropna(subset=["year"])
    event_years["year"] = event_years["year"].astype("int64")
    return event_years


# ── Node 2 ──────────────────────────────────────────────────────
def category_lifespans(event_years: pd.DataFrame) -> pd.DataFrame:
    """First year, last year and row count for every raw label."""
    lifespans = (
        event_years.groupby("label", as_index=False)
        .agg(
            first_year=("year", "min"),
            last_year=("year", "max"),
            n_events=("year", "size"),
        )
        .sort_values(["first_year", "label"], kind="mergesort")
        .reset_index(drop=True)
    )
    logger.info("%s distinct raw labels", f"{len(lifespans):,}")
    return lifespans


# ── Node 3 ──────────────────────────────────────────────────────
def distinct_categories_by_year(event_years: pd.DataFrame) -> pd.DataFrame:
    """Number of distinct raw labels used in each year.

    The curve drops to a flat 48 once the standard vocabulary is in
    force; that knee is the cutoff year. These counts use the local
    calendar year; check_cutoff_year confirms the pick against the UTC
    year the pipeline actually filters on.
    """
    return (
        event_years.groupby("year", as_index=False)
        .agg(n_labels=("label", "nunique"))
        .sort_values("year")
        .reset_index(drop=True)
    )


# ── Node 4 ──────────────────────────────────────────────────────
def check_cutoff_year(
    events_with_timestamps: pd.DataFrame, cutoff_year: int
) -> dict[str, Any]:
    """Compare the labels that pass the cutoff filter with the vocabulary.

    Uses the UTC ``year`` built by build_timestamps, the same column
    filter_from_cutoff_year keeps rows by, so a late-evening 31 December
    event that lands in the cutoff year in UTC is checked too.

    Returns:
        Summary dict: whether the label sets match, plus any labels
        seen but not in the vocabulary (``unexpected``) and vocabulary
        entries never seen (``unused``).
    """
    recent = events_with_timestamps[events_with_timestamps["year"] >= cutoff_year]
    seen = set(recent["EVTYPE"].astype(str).str.strip().str.upper())
    vocabulary = set(EVENT_CATEGORIES)

    unexpected = sorted(seen - vocabulary)
    unused = sorted(vocabulary - seen)
    summary = {
        "cutoff_year": cutoff_year,
        "matches_vocabulary": not unexpected and not unused,
        "n_labels": len(seen),
        "unexpected": unexpected,
        "unused": unused,
    }

    if unexpected:
        logger.warning(
            "cutoff_year=%d keeps %d labels outside the vocabulary: %s",
            cutoff_year,
            len(unexpected),
            unexpected,
        )
    if unused:
        logger.warning(
            "cutoff_year=%d: %d vocabulary labels never appear: %s",
            cutoff_year,
            len(unused),
            unused,
        )
    if summary["matches_vocabulary"]:
        logger.info(
            "cutoff_year=%d: labels match the %d-entry vocabulary",
            cutoff_year,
            len(vocabulary),
        )
    return summary
