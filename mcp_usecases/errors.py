"""Exceptions raised by the provider services.

Tool handlers catch these (and any other failure) and turn them into a
text result for the agent, so nothing here crosses the tool boundary.
"""

from typing import Optional


class ToolError(Exception):
    """Base class for errors raised while serving a tool call."""


class ConfigurationError(ToolError):
    """A provider is missing the credentials or settings it needs."""


class ProviderError(ToolError):
    """An external API answered with an error or an unusable payload."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class DocumentValidationError(ToolError):
    """Document content is not fit for processing."""


class ReservationNotFoundError(ToolError):
    """No reservation matches the given id and email."""


class ReservationAlreadyCancelledError(ToolError):
    """The reservation was cancelled before."""

    def __init__(self, reservation_id: str):
        self.reservation_id = reservation_id
        super().__init__(f"Reservation {reservation_id} is already cancelled")
