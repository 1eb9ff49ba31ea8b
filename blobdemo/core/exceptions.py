"""Exceptions raised by the round-trip demo.

Every failure of a demo step is reported as a DemoStepError subclass that
records which step failed. The underlying library exception is chained.
"""

from typing import Optional


class DemoError(Exception):
    """Base exception for the demo."""


class DemoStepError(DemoError):
    """A step of the round-trip sequence failed.

    Attributes:
        step: Name of the step that failed
    """

    default_step = "unknown"

    def __init__(self, message: str, step: Optional[str] = None) -> None:
        super().__init__(message)
        self.step = step or self.default_step

    @property
    def kind(self) -> str:
        """Error kind reported to the operator."""
        return type(self).__name__


class StorageConnectionError(DemoStepError, ConnectionError):
    """Credentials are invalid or the storage service is unreachable."""

    default_step = "connect"


class ContainerCreationError(DemoStepError):
    """The container could not be created (name collision or permissions)."""

    default_step = "create_container"


class LocalIOError(DemoStepError, OSError):
    """A local file could not be written or read."""

    default_step = "write_file"


class UploadError(DemoStepError):
    """The blob upload failed."""

    default_step = "upload"


class ListingError(DemoStepError):
    """Blobs in the container could not be enumerated."""

    default_step = "list_blobs"


class DownloadError(DemoStepError):
    """The blob download failed."""

    default_step = "download"
