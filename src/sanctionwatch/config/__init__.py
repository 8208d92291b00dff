"""Configuration module for sanctionwatch."""

from sanctionwatch.config.settings import Settings, UpdateFrequency, get_settings

__all__ = ["Settings", "UpdateFrequency", "get_settings"]
