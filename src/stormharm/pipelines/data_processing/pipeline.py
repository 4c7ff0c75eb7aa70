"""Raw → tidy pipeline for the NOAA Storm Data archive.

This pipeline reads the cached raw CSV (fetching it on first run),
applies eight sequential transformation nodes, and outputs the tidy
event table used by the harm_ranking pipeline.
"""

from kedro.pipeline import Pipeline, node, pipeline

from .nodes import (
    build_tidy_table,
    build_timestamps,
    compute_damage_dollars,
    filter_from_cutoff_year,
    load_storm_data,
    map_event_categories,
    normalize_timezones,
    select_columns,
)


def create_pipeline(**kwargs) -> Pipeline:  # noqa: ARG001
    """Create the data_processing pipeline.

    Node chain:
        raw CSV → select columns → normalize timezones → build timestamps
        → cutoff-year filter → map categories → damage dollars → tidy CSV
    """
    return pipeline(
        [
            node(
                func=load_storm_data,
                inputs=["params:raw_data_path", "params:source"],
                outputs="storm_events_raw",
                name="load_storm_data",
            ),
            node(
                func=select_columns,
                inputs="storm_events_raw",
                outputs="storm_events_selected",
                name="select_columns",
            ),
            node(
                func=normalize_timezones,
                inputs="storm_events_selected",
                outputs="events_with_zones",
                name="normalize_timezones",
            ),
            node(
                func=build_timestamps,
                inputs=["events_with_zones", "params:time_formats"],
                outputs="events_with_timestamps",
                name="build_timestamps",
            ),
            node(
                func=filter_from_cutoff_year,
                inputs=["events_with_timestamps", "params:cutoff_year"],
                outputs="events_since_cutoff",
                name="filter_from_cutoff_year",
            ),
            node(
                func=map_event_categories,
                inputs="events_since_cutoff",
                outputs="events_with_categories",
                name="map_event_categories",
            ),
            node(
                func=compute_damage_dollars,
                inputs=["events_with_categories", "params:damage"],
                outputs="events_with_damage",
                name="compute_damage_dollars",
            ),
            node(
                func=build_tidy_table,
                inputs="events_with_damage",
                outputs="storm_events_tidy",
                name="build_tidy_table",
            ),
        ]
    )
