"""Shared utilities for sanctionwatch."""
