"""Core module - calorie estimation, aggregation, assistant and nutrition logic."""

from .errors import (
    FitTrackError, ValidationError, InvalidArgument, NotFound, StorageError,
    UpstreamError, UpstreamTimeoutError, UpstreamFormatError,
)

__all__ = [
    'FitTrackError', 'ValidationError', 'InvalidArgument', 'NotFound', 'StorageError',
    'UpstreamError', 'UpstreamTimeoutError', 'UpstreamFormatError',
]
