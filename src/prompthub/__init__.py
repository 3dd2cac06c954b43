"""Prompt Hub sync: keep a local prompt library in step with a cloud copy."""

__version__ = "1.0.0"
