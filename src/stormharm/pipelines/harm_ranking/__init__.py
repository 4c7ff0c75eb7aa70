"""Harm ranking pipeline — top-k event types by injuries, deaths and damage."""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
