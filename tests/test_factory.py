"""Tests for backend selection."""

from unittest.mock import patch

from blobdemo.core.config import Settings
from blobdemo.storage import AzureBlobStore, S3BlobStore, create_blob_store


def test_create_azure_store():
    settings = Settings(
        _env_file=None,
        storage_backend="azure",
        azure_storage_connection_string="UseDevelopmentStorage=true",
    )

    with patch("blobdemo.storage.azure_client.BlobServiceClient") as mock_class:
        store = create_blob_store(settings)

    assert isinstance(store, AzureBlobStore)
    mock_class.from_connection_string.assert_called_once_with("UseDevelopmentStorage=true")


def test_create_s3_store():
    settings = Settings(
        _env_file=None,
        storage_backend="s3",
        s3_endpoint_url="http://localhost:9000",
        s3_access_key="minioadmin",
        s3_secret_key="minioadmin123",
        s3_region="eu-central-1",
    )

    with patch("blobdemo.storage.s3_client.boto3") as mock_boto3:
        store = create_blob_store(settings)

    assert isinstance(store, S3BlobStore)
    assert store.region == "eu-central-1"
    kwargs = mock_boto3.client.call_args.kwargs
    assert kwargs["endpoint_url"] == "http://localhost:9000"
    assert kwargs["aws_access_key_id"] == "minioadmin"
