"""Download and decompress the NOAA Storm Data archive.

Raw layer: the data exactly as published, only decompressed into
data/01_raw/. The Kedro loader does the same on first run; this script
just lets you prime the cache (and peek at the data) up front.
"""

import logging

import pandas as pd

from stormharm.pipelines.data_processing.nodes import (
    KEEP_COLUMNS,
    decompress_archive,
    fetch_archive,
)

SOURCE_URL = "https://d396qusza40orc.cloudfront.net/repdata%2Fdata%2FStormData.csv.bz2"
ARCHIVE_PATH = "data/01_raw/repdata_data_StormData.csv.bz2"
CSV_PATH = "data/01_raw/repdata_data_StormData.csv"


def explore_data(file_path: str) -> None:
    """Print a quick overview of the columns the pipeline uses."""
    df = pd.read_csv(file_path, usecols=KEEP_COLUMNS, dtype=str)

    print(f"\nRow count: {len(df):,}")
    print(f"Distinct EVTYPE labels: {df['EVTYPE'].nunique():,}")

    print("\nTIME_ZONE codes")
    print(df["TIME_ZONE"].value_counts(dropna=False).to_string())

    for col in ("PROPDMGEXP", "CROPDMGEXP"):
        print(f"\n{col} codes")
        print(df[col].value_counts(dropna=False).to_string())


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    archive = fetch_archive(SOURCE_URL, ARCHIVE_PATH)
    csv_file = decompress_archive(archive, CSV_PATH)

    explore_data(str(csv_file))
