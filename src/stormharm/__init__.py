"""Storm Harm: which severe-weather event types hurt people and property most."""

__version__ = "0.1.0"
