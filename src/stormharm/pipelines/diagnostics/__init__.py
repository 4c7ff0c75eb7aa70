"""Diagnostics pipeline — event label churn over time."""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
