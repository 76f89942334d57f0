"""Command-line interface for Cutline."""

__version__ = "0.1.0"
