"""Serve rule files from a locally mirrored Git repository."""

__version__ = "1.0.0"
