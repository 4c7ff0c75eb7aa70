"""Raw → tidy transformation nodes for the NOAA Storm Data archive.

Each function is a Kedro node: pure input → output, no side effects
(apart from the loader, which fills the local cache on first run).
Together they take the 37-column raw archive down to one tidy row per
event with a UTC timestamp, a canonical event category and dollar
damage values.
"""

from __future__ import annotations

import bz2
import logging
import shutil
from pathlib import Path
from typing import Any

import pandas as pd
import requests

from .lookups import (
    DAMAGE_MULTIPLIERS,
    EVENT_CATEGORIES,
    INVALID_ZONE,
    REFERENCE_ZONE,
    TIMEZONE_CODES,
)

logger = logging.getLogger(__name__)

# ── Columns we keep from the raw archive ────────────────────────────
KEEP_COLUMNS: list[str] = [
    "EVTYPE",
    "BGN_DATE",
    "BGN_TIME",
    "TIME_ZONE",
    "FATALITIES",
    "INJURIES",
    "PROPDMG",
    "PROPDMGEXP",
    "CROPDMG",
    "CROPDMGEXP",
]

# Read as text so "0130" keeps its leading zero and "0" stays a code.
_TEXT_COLUMNS: dict[str, str] = {
    "EVTYPE": "str",
    "BGN_DATE": "str",
    "BGN_TIME": "str",
    "TIME_ZONE": "str",
    "PROPDMGEXP": "str",
    "CROPDMGEXP": "str",
}

# (magnitude column, unit column, output column)
_DAMAGE_FIELDS: list[tuple[str, str, str]] = [
    ("PROPDMG", "PROPDMGEXP", "property_damage"),
    ("CROPDMG", "CROPDMGEXP", "crop_damage"),
]

_UNKNOWN_UNIT_POLICIES = ("default", "reject")

TIDY_COLUMNS: list[str] = [
    "timestamp",
    "category",
    "injuries",
    "fatalities",
    "property_damage",
    "crop_damage",
]


class UnmappedCategoryError(ValueError):
    """Raised when an event label outside the canonical vocabulary
    survives the cutoff-year filter."""


# ── Cache helpers ────────────────────────────────────────────────────
def fetch_archive(url: str, archive_path: str | Path, timeout: float = 300) -> Path:
    """Download the compressed archive unless it is already cached.

    Streams into a ``.part`` file and renames on success, so an
    interrupted download never looks like a complete archive.
    """
    archive = Path(archive_path)
    if archive.exists():
        logger.info("Using cached archive %s", archive)
        return archive

    archive.parent.mkdir(parents=True, exist_ok=True)
    partial = archive.with_name(archive.name + ".part")

    logger.info("Downloading %s → %s", url, archive)
    with requests.get(url, stream=True, timeout=timeout) as response:
        response.raise_for_status()
        with open(partial, "wb") as f:
            for chunk in response.iter_content(chunk_size=1024 * 1024):
                if chunk:
                    f.write(chunk)
    partial.replace(archive)

    logger.info(
        "Downloaded %.1f MB", archive.stat().st_size / 1024 / 1024
    )
    return archive


def decompress_archive(archive_path: str | Path, csv_path: str | Path) -> Path:
    """Decompress a ``.bz2`` archive to ``csv_path``."""
    csv_file = Path(csv_path)
    csv_file.parent.mkdir(parents=True, exist_ok=True)
    with bz2.open(archive_path, "rb") as f_in, open(csv_file, "wb") as f_out:
        shutil.copyfileobj(f_in, f_out)
    logger.info(
        "Decompressed to %s (%.1f MB)",
        csv_file,
        csv_file.stat().st_size / 1024 / 1024,
    )
    return csv_file


# ── Node 1 ───────────────────────────────────────────────────────────
def load_storm_data(raw_data_path: str, source: dict[str, Any]) -> pd.DataFrame:
    """Read the uncompressed Storm Data CSV, filling the cache if needed.

    If ``raw_data_path`` is missing, the ``.bz2`` archive is fetched from
    ``source["url"]`` (only when not already at ``source["archive_path"]``)
    and decompressed to ``raw_data_path``. Network errors propagate and
    abort the run.

    Args:
        raw_data_path: Path of the cached uncompressed CSV.
        source: Dict with ``url``, ``archive_path`` and optional ``timeout``.

    Returns:
        The full raw DataFrame, one row per reported event.
    """
    csv_file = Path(raw_data_path)

    if not csv_file.exists():
        archive = fetch_archive(
            source["url"],
            source["archive_path"],
            timeout=source.get("timeout", 300),
        )
        decompress_archive(archive, csv_file)

    df = pd.read_csv(csv_file, dtype=_TEXT_COLUMNS, low_memory=False)
    logger.info(
        "Loaded %s: %s rows, %s columns",
        csv_file.name,
        f"{len(df):,}",
        len(df.columns),
    )
    return df


# ── Node 2 ───────────────────────────────────────────────────────────
def select_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Keep only the ten columns the analysis needs.

    Args:
        df: Raw Storm Data DataFrame.

    Returns:
        DataFrame with only the columns in KEEP_COLUMNS.
    """
    missing = [c for c in KEEP_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f"Expected columns not found in data: {missing}")

    before_cols = len(df.columns)
    df_selected = df[KEEP_COLUMNS].copy()

    logger.info(
        "Column selection: kept %d of %d columns (dropped %d)",
        len(KEEP_COLUMNS),
        before_cols,
        before_cols - len(KEEP_COLUMNS),
    )
    return df_selected


# ── Node 3 ───────────────────────────────────────────────────────────
def normalize_timezones(df: pd.DataFrame) -> pd.DataFrame:
    """Map raw TIME_ZONE codes to fixed-offset zones and drop the rest.

    Codes missing from TIMEZONE_CODES, or listed there as invalid
    (UNK, ESY, ...), cannot anchor a timestamp, so their rows are
    excluded. The count and the offending codes are logged.

    Args:
        df: DataFrame after column selection.

    Returns:
        DataFrame with a ``time_zone_canonical`` column and only rows
        with a usable timezone.
    """
    df = df.copy()
    codes = df["TIME_ZONE"].astype(str).str.strip()
    df["time_zone_canonical"] = codes.map(dict(TIMEZONE_CODES)).fillna(INVALID_ZONE)

    invalid = df["time_zone_canonical"] == INVALID_ZONE
    if invalid.any():
        logger.warning(
            "Timezone: dropped %s rows with invalid codes %s",
            f"{invalid.sum():,}",
            codes[invalid].value_counts().to_dict(),
        )

    df_valid = df[~invalid].copy()
    logger.info(
        "Timezone filter: kept %s of %s rows",
        f"{len(df_valid):,}",
        f"{len(df):,}",
    )
    return df_valid


# Formats whose fields have no separators: strptime's %H will happily take
# one digit, so "130" would read as 13:00. Only exact-width values qualify.
_FIXED_WIDTH_FORMATS: dict[str, str] = {
    "%H%M": r"\d{4}",
}


def _parse_clock(times: pd.Series, time_formats: list[str]) -> pd.Series:
    """Parse time-of-day strings, trying each format in turn.

    Returns a timedelta Series (offset from midnight), NaT where no
    format matched.
    """
    clock = pd.Series(pd.NaT, index=times.index, dtype="datetime64[ns]")
    for fmt in time_formats:
        pending = clock.isna()
        if fmt in _FIXED_WIDTH_FORMATS:
            width_ok = times.str.fullmatch(_FIXED_WIDTH_FORMATS[fmt])
            pending &= width_ok.fillna(False).astype(bool)
        if not pending.any():
            continue
        parsed = pd.to_datetime(times[pending], format=fmt, errors="coerce")
        clock = clock.fillna(parsed)
    return clock - clock.dt.normalize()


# ── Node 4 ───────────────────────────────────────────────────────────
def build_timestamps(df: pd.DataFrame, time_formats: list[str]) -> pd.DataFrame:
    """Combine BGN_DATE, BGN_TIME and the canonical zone into one timestamp.

    BGN_DATE looks like "4/18/1950 0:00:00"; only its month/day/year part
    is used. BGN_TIME comes as "0130" or "03:00:00 PM" depending on the
    era, so each format in ``time_formats`` is tried in order. Rows whose
    date or time matches no format are dropped, not defaulted.

    The local wall time is localised to the row's fixed-offset zone and
    converted to UTC, so ``year`` is comparable across zones.

    Args:
        df: DataFrame after timezone normalization.
        time_formats: strptime formats accepted for BGN_TIME.

    Returns:
        DataFrame with ``timestamp`` (tz-aware, UTC) and ``year`` columns.
    """
    df = df.copy()
    total = len(df)

    dates = pd.to_datetime(
        df["BGN_DATE"].astype(str).str.split().str[0],
        format="%m/%d/%Y",
        errors="coerce",
    )
    offsets = _parse_clock(df["BGN_TIME"].astype(str).str.strip(), time_formats)

    bad_date = dates.isna()
    bad_time = offsets.isna()
    if bad_date.any():
        logger.warning(
            "BGN_DATE: dropped %s rows that could not be parsed",
            f"{bad_date.sum():,}",
        )
    if bad_time.any():
        logger.warning(
            "BGN_TIME: dropped %s rows matching none of %s. Samples: %s",
            f"{bad_time.sum():,}",
            time_formats,
            list(df.loc[bad_time, "BGN_TIME"].unique()[:10]),
        )

    keep = ~(bad_date | bad_time)
    df = df[keep].copy()
    local = dates[keep] + offsets[keep]

    pieces = [
        local.loc[index].dt.tz_localize(zone).dt.tz_convert(REFERENCE_ZONE)
        for zone, index in df.groupby("time_zone_canonical").groups.items()
    ]
    if pieces:
        df["timestamp"] = pd.concat(pieces)
    else:
        df["timestamp"] = pd.Series(dtype=f"datetime64[ns, {REFERENCE_ZONE}]")
    df["year"] = df["timestamp"].dt.year

    logger.info(
        "Timestamps built: kept %s of %s rows",
        f"{len(df):,}",
        f"{total:,}",
    )
    if len(df):
        logger.info(
            "Year range: %d–%d", df["year"].min(), df["year"].max()
        )
    return df


# ── Node 5 ───────────────────────────────────────────────────────────
def filter_from_cutoff_year(df: pd.DataFrame, cutoff_year: int) -> pd.DataFrame:
    """Drop events before the year NOAA adopted the 48 standard event types.

    Before the cutoff the EVTYPE field is free text with hundreds of
    spellings; from the cutoff on it uses exactly the canonical
    vocabulary. The cutoff comes from the diagnostics pipeline and is
    fixed in parameters.yml.

    Args:
        df: DataFrame with a ``year`` column.
        cutoff_year: First year to keep.

    Returns:
        DataFrame containing only events from ``cutoff_year`` onward.
    """
    total = len(df)
    df_recent = df[df["year"] >= cutoff_year].copy()
    dropped = total - len(df_recent)

    logger.info(
        "Cutoff filter (year >= %d): kept %s of %s rows (dropped %s = %.1f%%)",
        cutoff_year,
        f"{len(df_recent):,}",
        f"{total:,}",
        f"{dropped:,}",
        (dropped / total * 100) if total > 0 else 0,
    )
    return df_recent


# ── Node 6 ───────────────────────────────────────────────────────────
def map_event_categories(df: pd.DataFrame) -> pd.DataFrame:
    """Replace raw EVTYPE labels with canonical display names.

    Labels are stripped and upper-cased before lookup. Any label left
    unmapped means the cutoff year is wrong for this data, so it raises
    instead of dropping rows.

    Args:
        df: DataFrame after the cutoff-year filter.

    Returns:
        DataFrame with a ``category`` column.

    Raises:
        UnmappedCategoryError: if any label is not in EVENT_CATEGORIES.
    """
    df = df.copy()
    labels = df["EVTYPE"].astype(str).str.strip().str.upper()
    df["category"] = labels.map(dict(EVENT_CATEGORIES))

    unmapped = df["category"].isna()
    if unmapped.any():
        counts = labels[unmapped].value_counts().to_dict()
        raise UnmappedCategoryError(
            f"{unmapped.sum():,} rows have event labels outside the "
            f"canonical vocabulary: {counts}. Check cutoff_year."
        )

    logger.info(
        "Mapped %s rows onto %d canonical categories",
        f"{len(df):,}",
        df["category"].nunique(),
    )
    return df


# ── Node 7 ───────────────────────────────────────────────────────────
def compute_damage_dollars(df: pd.DataFrame, damage: dict[str, Any]) -> pd.DataFrame:
    """Decode PROPDMG/PROPDMGEXP and CROPDMG/CROPDMGEXP into dollars.

    The exponent code gives the multiplier:
    - "B" → 1e9, "M" → 1e6, "K" → 1e3, "0" → 1
    - codes are stripped and upper-cased first, so "k" counts as "K"

    Any other code (including blank) is handled by
    ``damage["unknown_unit_policy"]``:
    - "default": multiplier 1, with a warning
    - "reject": the row is dropped

    Args:
        df: DataFrame after category mapping.
        damage: Dict with ``unknown_unit_policy``.

    Returns:
        DataFrame with ``property_damage`` and ``crop_damage`` columns.
    """
    policy = damage.get("unknown_unit_policy", "default")
    if policy not in _UNKNOWN_UNIT_POLICIES:
        raise ValueError(
            f"unknown_unit_policy must be one of {_UNKNOWN_UNIT_POLICIES}, "
            f"got {policy!r}"
        )

    df = df.copy()
    any_unknown = pd.Series(False, index=df.index)

    for magnitude_col, unit_col, new_col in _DAMAGE_FIELDS:
        units = df[unit_col].fillna("").astype(str).str.strip().str.upper()
        multiplier = units.map(dict(DAMAGE_MULTIPLIERS))

        unknown = multiplier.isna()
        if unknown.any():
            logger.warning(
                "%s: %s rows have unknown unit codes %s (policy=%s)",
                unit_col,
                f"{unknown.sum():,}",
                units[unknown].value_counts().head(10).to_dict(),
                policy,
            )
        any_unknown |= unknown

        magnitude = pd.to_numeric(df[magnitude_col], errors="coerce")
        n_missing = magnitude.isna().sum()
        if n_missing > 0:
            # No reported damage = $0
            logger.info(
                "%s: %s missing values treated as 0",
                magnitude_col,
                f"{n_missing:,}",
            )
        df[new_col] = magnitude.fillna(0.0).astype(float) * multiplier.fillna(1.0)

    if policy == "reject" and any_unknown.any():
        df = df[~any_unknown].copy()
        logger.info(
            "Rejected %s rows with unknown damage unit codes",
            f"{any_unknown.sum():,}",
        )

    logger.info(
        "Damage computed: property $%s | crop $%s",
        f"{df['property_damage'].sum():,.0f}",
        f"{df['crop_damage'].sum():,.0f}",
    )
    return df


# ── Node 8 ───────────────────────────────────────────────────────────
def build_tidy_table(df: pd.DataFrame) -> pd.DataFrame:
    """Shape the final analysis-ready table.

    Rows are stable-sorted by timestamp and the timestamp is rendered as
    an ISO-8601 UTC string, so re-running on the same input writes a
    byte-identical CSV.

    Args:
        df: DataFrame after damage computation.

    Returns:
        Tidy DataFrame with the columns in TIDY_COLUMNS.
    """
    tidy = df.rename(columns={"INJURIES": "injuries", "FATALITIES": "fatalities"})
    tidy = tidy[TIDY_COLUMNS].sort_values("timestamp", kind="mergesort")
    tidy = tidy.reset_index(drop=True)

    tidy["timestamp"] = tidy["timestamp"].dt.strftime("%Y-%m-%dT%H:%M:%SZ")
    for col in ("injuries", "fatalities"):
        tidy[col] = pd.to_numeric(tidy[col], errors="coerce").fillna(0).astype("int64")

    logger.info(
        "Tidy table ready: %s rows × %d columns, %d categories",
        f"{len(tidy):,}",
        len(tidy.columns),
        tidy["category"].nunique(),
    )
    return tidy
