"""Azure Blob Storage backend.

This module provides AzureBlobStore, a BlobStore built on the asynchronous
client of the azure-storage-blob SDK. The client is bound to a storage
account through its connection string.
"""

import logging
from typing import AsyncIterator, BinaryIO

from azure.core.exceptions import AzureError, ResourceExistsError
from azure.storage.blob.aio import BlobServiceClient, StorageStreamDownloader

from blobdemo.core.exceptions import (
    ContainerCreationError,
    DownloadError,
    ListingError,
    StorageConnectionError,
    UploadError,
)
from blobdemo.storage.base import BlobDownload, BlobStore

logger = logging.getLogger(__name__)


class AzureBlobDownload(BlobDownload):
    """Content of a blob whose download the service has accepted."""

    def __init__(
        self,
        downloader: StorageStreamDownloader,
        container_name: str,
        blob_name: str,
    ) -> None:
        self._downloader = downloader
        self.container_name = container_name
        self.blob_name = blob_name

    async def readinto(self, destination: BinaryIO) -> int:
        try:
            size = await self._downloader.readinto(destination)
        except AzureError as e:
            raise DownloadError(
                f"Failed to download blob '{self.blob_name}' "
                f"from '{self.container_name}': {e}"
            ) from e

        logger.info(f"Downloaded blob {self.blob_name} ({size} bytes)")
        return size


class AzureBlobStore(BlobStore):
    """Azure Blob Storage client for the round-trip demo.

    Attributes:
        account_name: Name of the storage account the client is bound to
        _service: Async BlobServiceClient instance
    """

    def __init__(self, connection_string: str) -> None:
        """Build the service client from a connection string.

        Args:
            connection_string: Storage account connection string

        Raises:
            StorageConnectionError: If the connection string is malformed
        """
        try:
            self._service = BlobServiceClient.from_connection_string(connection_string)
        except ValueError as e:
            raise StorageConnectionError(f"Invalid connection string: {e}") from e

        self.account_name = self._service.account_name

    async def connect(self) -> None:
        """Verify the account with a Get Account Information request.

        The request needs account-level authorization (account key or an
        account SAS). A container-scoped SAS is rejected here, but it could
        not create the demo container in the next step either.

        Raises:
            StorageConnectionError: If credentials are invalid or the
                service is unreachable
        """
        try:
            info = await self._service.get_account_information()
        except AzureError as e:
            raise StorageConnectionError(
                f"Unable to reach storage account '{self.account_name}': {e}"
            ) from e

        logger.debug(
            f"Connected to storage account {self.account_name} "
            f"(kind: {info.get('account_kind')}, sku: {info.get('sku_name')})"
        )

    async def create_container(self, container_name: str) -> None:
        try:
            await self._service.create_container(container_name)
        except ResourceExistsError as e:
            raise ContainerCreationError(
                f"Container '{container_name}' already exists"
            ) from e
        except AzureError as e:
            raise ContainerCreationError(
                f"Failed to create container '{container_name}': {e}"
            ) from e

        logger.info(f"Created container {container_name}")

    def blob_url(self, container_name: str, blob_name: str) -> str:
        return self._service.get_blob_client(container_name, blob_name).url

    async def upload_blob(
        self,
        container_name: str,
        blob_name: str,
        data: BinaryIO,
        overwrite: bool = True,
    ) -> None:
        blob_client = self._service.get_blob_client(container_name, blob_name)
        try:
            await blob_client.upload_blob(data, overwrite=overwrite)
        except AzureError as e:
            raise UploadError(
                f"Failed to upload blob '{blob_name}' to '{container_name}': {e}"
            ) from e

        logger.info(f"Uploaded blob {blob_name} to container {container_name}")

    async def list_blobs(self, container_name: str) -> AsyncIterator[str]:
        container_client = self._service.get_container_client(container_name)
        try:
            async for blob in container_client.list_blobs():
                yield blob.name
        except AzureError as e:
            raise ListingError(
                f"Failed to list blobs in '{container_name}': {e}"
            ) from e

    async def open_blob(self, container_name: str, blob_name: str) -> BlobDownload:
        blob_client = self._service.get_blob_client(container_name, blob_name)
        try:
            downloader = await blob_client.download_blob()
        except AzureError as e:
            raise DownloadError(
                f"Failed to download blob '{blob_name}' from '{container_name}': {e}"
            ) from e

        return AzureBlobDownload(downloader, container_name, blob_name)

    async def close(self) -> None:
        await self._service.close()
