"""Tidy → rankings pipeline for storm harm by event type.

Node dependency graph:
    storm_events_tidy -> [aggregate_overall] -> harm_overall
    storm_events_tidy -> [aggregate_by_year] -> harm_by_year
    harm_overall -> [rank_overall] -> top_overall -> [worst_categories]
    harm_by_year -> [rank_by_year] -> top_by_year -> [worst_categories_by_year]

The overall and per-year branches are independent of each other.
"""

from kedro.pipeline import Pipeline, node, pipeline

from .nodes import (
    aggregate_by_year,
    aggregate_overall,
    rank_by_year,
    rank_overall,
    worst_categories,
    worst_categories_by_year,
)


def create_pipeline(**kwargs) -> Pipeline:  # noqa: ARG001
    """Create the harm_ranking pipeline."""
    return pipeline(
        [
            node(
                func=aggregate_overall,
                inputs="storm_events_tidy",
                outputs="harm_overall",
                name="aggregate_overall",
            ),
            node(
                func=aggregate_by_year,
                inputs="storm_events_tidy",
                outputs="harm_by_year",
                name="aggregate_by_year",
            ),
            node(
                func=rank_overall,
                inputs=["harm_overall", "params:top_k.overall"],
                outputs="top_overall",
                name="rank_overall",
            ),
            node(
                func=rank_by_year,
                inputs=["harm_by_year", "params:top_k.yearly"],
                outputs="top_by_year",
                name="rank_by_year",
            ),
            node(
                func=worst_categories,
                inputs="top_overall",
                outputs="worst_categories",
                name="worst_categories",
            ),
            node(
                func=worst_categories_by_year,
                inputs="top_by_year",
                outputs="worst_categories_by_year",
                name="worst_categories_by_year",
            ),
        ]
    )
