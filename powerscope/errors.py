"""Exceptions shared across the charting core."""


class ConfigurationError(ValueError):
    """Raised when a channel, zoom table or view is configured with invalid values."""
