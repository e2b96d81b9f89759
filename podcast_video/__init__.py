"""Podcast Video Generator - topic to two-speaker podcast video."""

__version__ = "1.0.0"
