"""S3-compatible storage backend.

This module provides S3BlobStore, a BlobStore that runs the walkthrough
against any S3-compatible service including MinIO and AWS S3. Containers
map to buckets and blobs map to object keys.

boto3 is blocking, so every call is dispatched to a worker thread with
asyncio.to_thread. Steps still run strictly one after another.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, BinaryIO, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from blobdemo.core.exceptions import (
    ContainerCreationError,
    DownloadError,
    ListingError,
    StorageConnectionError,
    UploadError,
)
from blobdemo.storage.base import BlobDownload, BlobStore

logger = logging.getLogger(__name__)

BOTO_ERRORS = (BotoCoreError, ClientError)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


def _error_code(error: Exception) -> str:
    """Return the S3 error code of a ClientError ("" for other errors)."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code", "")
    return ""


class S3BlobDownload(BlobDownload):
    """Body of a GetObject response, copied to a local file in chunks."""

    def __init__(self, body: Any, container_name: str, blob_name: str) -> None:
        self._body = body
        self.container_name = container_name
        self.blob_name = blob_name

    async def readinto(self, destination: BinaryIO) -> int:
        size = 0
        try:
            while True:
                chunk = await asyncio.to_thread(self._body.read, DOWNLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                destination.write(chunk)
                size += len(chunk)
        except BOTO_ERRORS as e:
            raise DownloadError(
                f"Failed to download '{self.blob_name}' "
                f"from bucket '{self.container_name}': {e}"
            ) from e
        finally:
            self._body.close()

        logger.info(f"Downloaded {self.blob_name} from bucket {self.container_name}")
        return size


class S3BlobStore(BlobStore):
    """S3-compatible storage client for the round-trip demo.

    Attributes:
        region: Region used for bucket creation
        _s3: Boto3 S3 client instance
    """

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        endpoint_url: Optional[str] = None,
        region: str = "us-east-1",
    ) -> None:
        """Initialize the boto3 client.

        Args:
            access_key: S3 access key ID
            secret_key: S3 secret access key
            endpoint_url: S3 endpoint URL (e.g., http://localhost:9000 for MinIO),
                None for the AWS default endpoint
            region: Region name, also used as bucket LocationConstraint
        """
        self.region = region

        self._s3 = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=Config(signature_version="s3v4"),
        )

    async def connect(self) -> None:
        try:
            response = await asyncio.to_thread(self._s3.list_buckets)
        except BOTO_ERRORS as e:
            raise StorageConnectionError(
                f"Unable to reach S3 endpoint {self._s3.meta.endpoint_url}: {e}"
            ) from e

        logger.debug(
            f"Connected to {self._s3.meta.endpoint_url} "
            f"({len(response.get('Buckets', []))} buckets visible)"
        )

    async def create_container(self, container_name: str) -> None:
        params = {"Bucket": container_name}
        # us-east-1 rejects an explicit LocationConstraint
        if self.region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": self.region}

        try:
            await asyncio.to_thread(self._s3.create_bucket, **params)
        except BOTO_ERRORS as e:
            if _error_code(e) in ("BucketAlreadyExists", "BucketAlreadyOwnedByYou"):
                raise ContainerCreationError(
                    f"Bucket '{container_name}' already exists"
                ) from e
            raise ContainerCreationError(
                f"Failed to create bucket '{container_name}': {e}"
            ) from e

        logger.info(f"Created bucket {container_name}")

    def blob_url(self, container_name: str, blob_name: str) -> str:
        return f"{self._s3.meta.endpoint_url}/{container_name}/{blob_name}"

    async def _object_exists(self, container_name: str, blob_name: str) -> bool:
        try:
            await asyncio.to_thread(
                self._s3.head_object, Bucket=container_name, Key=blob_name
            )
            return True
        except ClientError as e:
            if _error_code(e) in ("404", "NoSuchKey", "NotFound"):
                return False
            raise

    async def upload_blob(
        self,
        container_name: str,
        blob_name: str,
        data: BinaryIO,
        overwrite: bool = True,
    ) -> None:
        try:
            # put_object always replaces, so refusing to overwrite needs a check
            if not overwrite and await self._object_exists(container_name, blob_name):
                raise UploadError(
                    f"Blob '{blob_name}' already exists in '{container_name}'"
                )

            await asyncio.to_thread(
                self._s3.put_object,
                Bucket=container_name,
                Key=blob_name,
                Body=data,
            )
        except BOTO_ERRORS as e:
            raise UploadError(
                f"Failed to upload '{blob_name}' to bucket '{container_name}': {e}"
            ) from e

        logger.info(f"Uploaded {blob_name} to bucket {container_name}")

    async def list_blobs(self, container_name: str) -> AsyncIterator[str]:
        paginator = self._s3.get_paginator("list_objects_v2")
        pages = iter(paginator.paginate(Bucket=container_name))

        while True:
            try:
                page = await asyncio.to_thread(next, pages, None)
            except BOTO_ERRORS as e:
                raise ListingError(
                    f"Failed to list objects in bucket '{container_name}': {e}"
                ) from e

            if page is None:
                break

            for obj in page.get("Contents", []):
                yield obj["Key"]

    async def open_blob(self, container_name: str, blob_name: str) -> BlobDownload:
        try:
            response = await asyncio.to_thread(
                self._s3.get_object, Bucket=container_name, Key=blob_name
            )
        except BOTO_ERRORS as e:
            raise DownloadError(
                f"Failed to download '{blob_name}' from bucket '{container_name}': {e}"
            ) from e

        return S3BlobDownload(response["Body"], container_name, blob_name)

    async def close(self) -> None:
        await asyncio.to_thread(self._s3.close)
