"""Error types raised by the configuration store and its collaborators."""

from __future__ import annotations


class TokenURIError(Exception):
    """Base class for all caller-recoverable service errors."""


class InvalidArgument(TokenURIError):
    """A write received an empty value where a non-empty one is required."""


class Unauthorized(TokenURIError):
    """The caller does not hold the administrative capability."""


class BatchTooLarge(TokenURIError):
    """A bulk call exceeded `MAX_BATCH_SIZE` entries."""


class LengthMismatch(TokenURIError):
    """Parallel sequences passed to a bulk call differ in length."""
