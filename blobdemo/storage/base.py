"""Abstract interface for the object storage backends used by the demo.

A BlobStore is bound to one storage account. Containers and blobs are
addressed by name; blob content moves through binary file objects so the
caller owns (and closes) the local file handles.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, BinaryIO


class BlobDownload(ABC):
    """Blob content that the service has started sending.

    Returned by BlobStore.open_blob once the remote side has accepted the
    request, so the local destination is only opened for a blob that exists.
    """

    @abstractmethod
    async def readinto(self, destination: BinaryIO) -> int:
        """Write the blob content to ``destination``.

        Returns:
            Number of bytes written

        Raises:
            DownloadError: If the transfer fails
        """


class BlobStore(ABC):
    """Async object storage client bound to a single storage account.

    Implementations translate their library's failures into the
    blobdemo.core.exceptions taxonomy. OSError raised by the local file
    objects passed in is propagated unchanged.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Verify that the account is reachable with the configured credentials.

        Raises:
            StorageConnectionError: If credentials are invalid or the
                service is unreachable
        """

    @abstractmethod
    async def create_container(self, container_name: str) -> None:
        """Create a new container.

        Raises:
            ContainerCreationError: If the name is taken or creation is denied
        """

    @abstractmethod
    def blob_url(self, container_name: str, blob_name: str) -> str:
        """Return the URL under which the blob is (or will be) stored."""

    @abstractmethod
    async def upload_blob(
        self,
        container_name: str,
        blob_name: str,
        data: BinaryIO,
        overwrite: bool = True,
    ) -> None:
        """Upload the content of ``data`` as a blob.

        Raises:
            UploadError: If the upload fails
        """

    @abstractmethod
    def list_blobs(self, container_name: str) -> AsyncIterator[str]:
        """Lazily enumerate blob names in a container.

        Each call starts a fresh enumeration. Ordering is whatever the
        service returns.

        Raises:
            ListingError: If the container cannot be listed
        """

    @abstractmethod
    async def open_blob(self, container_name: str, blob_name: str) -> BlobDownload:
        """Start fetching a blob without touching any local file.

        Raises:
            DownloadError: If the blob cannot be fetched
        """

    async def download_blob(
        self,
        container_name: str,
        blob_name: str,
        destination: BinaryIO,
    ) -> None:
        """Write the full content of a blob to ``destination``.

        Raises:
            DownloadError: If the blob cannot be fetched
        """
        download = await self.open_blob(container_name, blob_name)
        await download.readinto(destination)

    async def close(self) -> None:
        """Release the underlying client."""

    async def __aenter__(self) -> "BlobStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
