"""Multi-resolution world statistics monitor."""

__version__ = "0.1.0"
