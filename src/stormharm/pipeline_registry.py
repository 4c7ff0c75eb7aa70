"""Project pipelines."""

from __future__ import annotations

from kedro.pipeline import Pipeline

from stormharm.pipelines import data_processing, diagnostics, harm_ranking


def register_pipelines() -> dict[str, Pipeline]:
    """Register the project's pipelines.

    ``diagnostics`` carries the data_processing nodes up to the
    timestamped events so it can run on its own.

    Returns:
        A mapping from pipeline names to ``Pipeline`` objects.
    """
    data_processing_pipeline = data_processing.create_pipeline()
    harm_ranking_pipeline = harm_ranking.create_pipeline()
    diagnostics_pipeline = diagnostics.create_pipeline()

    return {
        "__default__": (
            data_processing_pipeline + harm_ranking_pipeline + diagnostics_pipeline
        ),
        "data_processing": data_processing_pipeline,
        "harm_ranking": harm_ranking_pipeline,
        "diagnostics": (
            data_processing_pipeline.to_outputs(
                "storm_events_selected", "events_with_timestamps"
            )
            + diagnostics_pipeline
        ),
    }
