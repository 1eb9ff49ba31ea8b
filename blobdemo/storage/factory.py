"""Build the configured BlobStore from application settings."""

from blobdemo.core.config import Settings
from blobdemo.storage.azure_client import AzureBlobStore
from blobdemo.storage.base import BlobStore
from blobdemo.storage.s3_client import S3BlobStore


def create_blob_store(settings: Settings) -> BlobStore:
    """Create the storage backend selected by ``settings.storage_backend``.

    Args:
        settings: Application settings

    Returns:
        An unconnected BlobStore

    Raises:
        ValueError: If the backend name is unknown
        StorageConnectionError: If the Azure connection string is malformed
    """
    if settings.storage_backend == "azure":
        return AzureBlobStore(settings.azure_storage_connection_string)

    if settings.storage_backend == "s3":
        return S3BlobStore(
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
            endpoint_url=settings.s3_endpoint_url,
            region=settings.s3_region,
        )

    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
