"""
Domain errors shared by the core services, the stores and the API layer.
"""


class FitTrackError(Exception):
    """Base class for all FitTrack domain errors."""


class ValidationError(FitTrackError, ValueError):
    """A required field is missing or malformed (e.g. an unparseable date)."""


class InvalidArgument(FitTrackError, ValueError):
    """A caller passed a value outside the accepted domain (unknown enum, bad range)."""


class NotFound(FitTrackError):
    """Row does not exist or is not owned by the requesting user."""


class StorageError(FitTrackError):
    """The storage backend failed to persist data."""


class UpstreamError(FitTrackError):
    """The external LLM (or other upstream API) call failed."""


class UpstreamTimeoutError(UpstreamError):
    """The upstream call did not complete within the configured timeout."""


class UpstreamFormatError(UpstreamError):
    """The upstream response did not contain the expected structured data."""
