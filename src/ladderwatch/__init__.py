"""Ladderwatch: cached, background-refreshed cricket ladders for tracked clubs."""

__version__ = "0.1.0"
