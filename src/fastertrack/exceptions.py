"""
FasterTrack exceptions module.

Contains exception classes used across multiple modules to avoid circular dependencies.
"""


class FasterTrackError(Exception):
    """Base class for FasterTrack errors."""

    pass


class GatewayError(FasterTrackError):
    """Exception raised when the remote gateway is unreachable or returns an error status."""

    pass


class SnapshotDecodeError(FasterTrackError):
    """Exception raised when a columnar snapshot payload cannot be decoded."""

    pass
