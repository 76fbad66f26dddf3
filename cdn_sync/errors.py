"""
Exceptions raised by the sync tool.

Configuration problems surface before any upload begins. Upload problems
abort the whole run; there is no per-key recovery.
"""


class SyncError(Exception):
    """Base class for all sync failures."""


class ConfigurationError(SyncError):
    """Missing or malformed configuration, credentials or provider setup."""


class UploadError(SyncError):
    """A local read, remote listing or remote write failed."""

    def __init__(self, message: str, key: str = None):
        super().__init__(message)
        self.key = key


class SyncCancelled(SyncError):
    """The run was stopped through its cancellation token."""
