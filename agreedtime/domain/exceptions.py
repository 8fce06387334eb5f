"""
Domain-specific exception hierarchy for the agreedtime application.
"""


class AgreedTimeError(Exception):
    """Base class for all application-level errors."""


class EventAPIError(AgreedTimeError):
    """Raised when the remote event API cannot be reached or rejects a request."""


class PayloadError(AgreedTimeError):
    """Raised when event data returned by the API cannot be parsed."""
