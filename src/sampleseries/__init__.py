"""Synthetic sample series: build, validate and aggregate across concurrent cycles."""

__version__ = "0.1.0"
