"""Error taxonomy shared by the backend and the client-side session."""
from __future__ import annotations


class IndexIntellectError(Exception):
    """Base class for every error raised on purpose by this package."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class PlanValidationError(IndexIntellectError):
    """A required input was missing or blank."""

    status_code = 400
    public_message = "Missing required field"


class TransportError(IndexIntellectError):
    """The network call itself failed (no usable HTTP response)."""

    public_message = "Could not reach the study plan service"


class UpstreamError(IndexIntellectError):
    """The generative API answered with an error or an unusable payload."""

    public_message = "Failed to generate content from AI"


class ExtractionFailed(IndexIntellectError):
    """No known response shape held any generated text."""

    public_message = "Could not extract generated text"


class ConfigurationError(IndexIntellectError):
    """A required setting (usually the API credential) is absent."""

    public_message = "Generative API key not configured"


class SessionBusyError(IndexIntellectError):
    """A call of the same kind is already in flight for this session."""

    public_message = "A request is already in progress"


class InvalidTransitionError(IndexIntellectError):
    """The requested action is not available in the current session state."""

    public_message = "Action not available right now"


class CapabilityLoadError(IndexIntellectError):
    """One of the export rendering libraries could not be loaded."""

    public_message = "PDF tools failed to load"
