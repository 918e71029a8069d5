"""Incremental document builds driven by cascading directory configuration."""

__version__ = "0.1.0"
