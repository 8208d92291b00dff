"""Custom exceptions for sanctionwatch."""


class SanctionwatchError(Exception):
    """Base exception for all sanctionwatch errors."""

    pass


class ConfigurationError(SanctionwatchError):
    """Error in configuration or a missing collaborator."""

    pass
