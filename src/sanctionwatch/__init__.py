"""Screen person names against cached government sanctions lists."""

__version__ = "0.11.0"
