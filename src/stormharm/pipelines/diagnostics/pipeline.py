"""Category churn diagnostics for picking the cutoff year.

Label churn reads the column-selected events; the cutoff check reads
the timestamped events, so it sees the same UTC year the cutoff filter
uses. Run on its own with ``kedro run --pipeline diagnostics``; the
registry prepends the data_processing nodes it needs.
"""

from kedro.pipeline import Pipeline, node, pipeline

from .nodes import (
    category_lifespans,
    check_cutoff_year,
    distinct_categories_by_year,
    extract_event_years,
)


def create_pipeline(**kwargs) -> Pipeline:  # noqa: ARG001
    """Create the diagnostics pipeline."""
    return pipeline(
        [
            node(
                func=extract_event_years,
                inputs="storm_events_selected",
                outputs="event_label_years",
                name="extract_event_years",
            ),
            node(
                func=category_lifespans,
                inputs="event_label_years",
                outputs="category_lifespans",
                name="category_lifespans",
            ),
            node(
                func=distinct_categories_by_year,
                inputs="event_label_years",
                outputs="distinct_categories_by_year",
                name="distinct_categories_by_year",
            ),
            node(
                func=check_cutoff_year,
                inputs=["events_with_timestamps", "params:cutoff_year"],
                outputs="cutoff_year_check",
                name="check_cutoff_year",
            ),
        ]
    )
