"""
Custom exceptions for the application.

The scheduling engine never raises for ordinary capacity failures; these are
reserved for input that cannot be parsed at the configuration boundary.
"""

from typing import Any, Optional


class ZmanitError(Exception):
    """Base exception for zmanit."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(ZmanitError):
    """Validation error."""

    pass


class ConfigurationError(ZmanitError):
    """Schedule configuration could not be loaded."""

    pass
