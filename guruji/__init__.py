"""Guruji chat relay and client."""

__version__ = "0.1.0"
