"""Storage package for cloud object storage backends.

This package provides async clients for Azure Blob Storage and
S3-compatible services behind a common BlobStore interface.
"""

from blobdemo.storage.azure_client import AzureBlobStore
from blobdemo.storage.base import BlobStore
from blobdemo.storage.factory import create_blob_store
from blobdemo.storage.s3_client import S3BlobStore

__all__ = ["AzureBlobStore", "BlobStore", "S3BlobStore", "create_blob_store"]
