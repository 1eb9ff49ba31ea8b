"""Tests for the Azure Blob Storage backend.

These tests use mocks to avoid requiring a live storage account. They
verify that AzureBlobStore drives the async SDK client correctly and maps
SDK failures to the demo's exceptions.
"""

import io
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from azure.core.exceptions import (
    ClientAuthenticationError,
    HttpResponseError,
    ResourceExistsError,
    ResourceNotFoundError,
    ServiceRequestError,
)

from blobdemo.core.exceptions import (
    ContainerCreationError,
    DownloadError,
    ListingError,
    StorageConnectionError,
    UploadError,
)
from blobdemo.storage.azure_client import AzureBlobStore

CONNECTION_STRING = (
    "DefaultEndpointsProtocol=https;AccountName=testaccount;"
    "AccountKey=dGVzdGtleQ==;EndpointSuffix=core.windows.net"
)


@pytest.fixture
def mock_service():
    """Mock async BlobServiceClient."""
    service = MagicMock()
    service.account_name = "testaccount"
    service.get_account_information = AsyncMock(
        return_value={"sku_name": "Standard_LRS", "account_kind": "StorageV2"}
    )
    service.create_container = AsyncMock()
    service.close = AsyncMock()
    return service


@pytest.fixture
def mock_blob_client(mock_service):
    """Mock BlobClient returned by the service."""
    blob_client = MagicMock()
    blob_client.url = "https://testaccount.blob.core.windows.net/demoblob1/demofile1.txt"
    blob_client.upload_blob = AsyncMock()
    mock_service.get_blob_client.return_value = blob_client
    return blob_client


@pytest.fixture
def store(mock_service):
    """AzureBlobStore wired to the mock service."""
    with patch("blobdemo.storage.azure_client.BlobServiceClient") as mock_class:
        mock_class.from_connection_string.return_value = mock_service
        yield AzureBlobStore(CONNECTION_STRING)


async def _blob_pages(*names, error=None):
    for name in names:
        blob = MagicMock()
        blob.name = name
        yield blob
    if error is not None:
        raise error


def test_store_initialization(store, mock_service):
    """Test that the store is bound to the account of the connection string."""
    assert store.account_name == "testaccount"
    assert store._service is mock_service


def test_malformed_connection_string():
    """Test that a malformed connection string is a connection error."""
    with patch("blobdemo.storage.azure_client.BlobServiceClient") as mock_class:
        mock_class.from_connection_string.side_effect = ValueError(
            "Connection string is either blank or malformed."
        )

        with pytest.raises(StorageConnectionError) as exc_info:
            AzureBlobStore("not a connection string")

    assert exc_info.value.step == "connect"


@pytest.mark.asyncio
async def test_connect_queries_account(store, mock_service):
    """Test that connect verifies the account."""
    await store.connect()

    mock_service.get_account_information.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        ClientAuthenticationError("Server failed to authenticate the request."),
        ServiceRequestError("Name or service not known"),
    ],
)
async def test_connect_failure(store, mock_service, error):
    """Test that authentication and network errors become connection errors."""
    mock_service.get_account_information.side_effect = error

    with pytest.raises(StorageConnectionError) as exc_info:
        await store.connect()

    assert exc_info.value.__cause__ is error


@pytest.mark.asyncio
async def test_create_container(store, mock_service):
    """Test container creation."""
    await store.create_container("demoblob1234")

    mock_service.create_container.assert_awaited_once_with("demoblob1234")


@pytest.mark.asyncio
async def test_create_container_name_collision(store, mock_service):
    """Test that an existing container is reported as a creation error."""
    mock_service.create_container.side_effect = ResourceExistsError(
        "The specified container already exists."
    )

    with pytest.raises(ContainerCreationError, match="already exists"):
        await store.create_container("demoblob1234")


@pytest.mark.asyncio
async def test_create_container_permission_denied(store, mock_service):
    """Test that other service errors are reported as creation errors."""
    mock_service.create_container.side_effect = HttpResponseError(
        "This request is not authorized to perform this operation."
    )

    with pytest.raises(ContainerCreationError):
        await store.create_container("demoblob1234")


def test_blob_url(store, mock_service, mock_blob_client):
    """Test that the blob URL comes from the blob client."""
    url = store.blob_url("demoblob1", "demofile1.txt")

    assert url == mock_blob_client.url
    mock_service.get_blob_client.assert_called_once_with("demoblob1", "demofile1.txt")


@pytest.mark.asyncio
async def test_upload_blob_overwrites(store, mock_service, mock_blob_client):
    """Test that uploads pass the data through with overwrite enabled."""
    data = io.BytesIO(b"Hello, World!")

    await store.upload_blob("demoblob1", "demofile1.txt", data)

    mock_service.get_blob_client.assert_called_once_with("demoblob1", "demofile1.txt")
    mock_blob_client.upload_blob.assert_awaited_once_with(data, overwrite=True)


@pytest.mark.asyncio
async def test_upload_blob_failure(store, mock_blob_client):
    """Test that upload errors are wrapped."""
    mock_blob_client.upload_blob.side_effect = ServiceRequestError("Connection reset")

    with pytest.raises(UploadError) as exc_info:
        await store.upload_blob("demoblob1", "demofile1.txt", io.BytesIO(b"x"))

    assert exc_info.value.step == "upload"


@pytest.mark.asyncio
async def test_list_blobs(store, mock_service):
    """Test that blob names are yielded in service order."""
    container_client = MagicMock()
    container_client.list_blobs.return_value = _blob_pages("b.txt", "a.txt")
    mock_service.get_container_client.return_value = container_client

    names = [name async for name in store.list_blobs("demoblob1")]

    assert names == ["b.txt", "a.txt"]
    mock_service.get_container_client.assert_called_once_with("demoblob1")


@pytest.mark.asyncio
async def test_list_blobs_is_lazy(store, mock_service):
    """Test that nothing is requested until iteration starts."""
    store.list_blobs("demoblob1")

    mock_service.get_container_client.assert_not_called()


@pytest.mark.asyncio
async def test_list_blobs_failure(store, mock_service):
    """Test that a failure mid-listing becomes a listing error."""
    container_client = MagicMock()
    container_client.list_blobs.return_value = _blob_pages(
        "a.txt", error=HttpResponseError("Server busy")
    )
    mock_service.get_container_client.return_value = container_client

    names = []
    with pytest.raises(ListingError):
        async for name in store.list_blobs("demoblob1"):
            names.append(name)

    assert names == ["a.txt"]


@pytest.mark.asyncio
async def test_download_blob(store, mock_blob_client):
    """Test that the blob content is written to the destination."""
    downloader = MagicMock()
    downloader.readinto = AsyncMock(side_effect=lambda stream: stream.write(b"Hello, World!"))
    mock_blob_client.download_blob = AsyncMock(return_value=downloader)
    destination = io.BytesIO()

    await store.download_blob("demoblob1", "demofile1.txt", destination)

    assert destination.getvalue() == b"Hello, World!"
    downloader.readinto.assert_awaited_once_with(destination)


@pytest.mark.asyncio
async def test_download_blob_not_found(store, mock_blob_client):
    """Test that a missing blob is a download error."""
    mock_blob_client.download_blob = AsyncMock(
        side_effect=ResourceNotFoundError("The specified blob does not exist.")
    )

    with pytest.raises(DownloadError):
        await store.download_blob("demoblob1", "demofile1.txt", io.BytesIO())


@pytest.mark.asyncio
async def test_download_blob_local_write_error_propagates(store, mock_blob_client):
    """Test that errors writing the destination are not reported as download errors."""
    downloader = MagicMock()
    downloader.readinto = AsyncMock(side_effect=OSError("No space left on device"))
    mock_blob_client.download_blob = AsyncMock(return_value=downloader)

    with pytest.raises(OSError) as exc_info:
        await store.download_blob("demoblob1", "demofile1.txt", io.BytesIO())

    assert not isinstance(exc_info.value, DownloadError)


@pytest.mark.asyncio
async def test_context_manager_closes_client(store, mock_service):
    """Test that leaving the context closes the SDK client."""
    async with store as opened:
        assert opened is store

    mock_service.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_open_blob_fails_before_transfer(store, mock_blob_client):
    """Test that a rejected download fails before any content is requested."""
    mock_blob_client.download_blob = AsyncMock(
        side_effect=ResourceNotFoundError("The specified blob does not exist.")
    )

    with pytest.raises(DownloadError) as exc_info:
        await store.open_blob("demoblob1", "demofile1.txt")

    assert exc_info.value.step == "download"


@pytest.mark.asyncio
async def test_readinto_transfer_failure(store, mock_blob_client):
    """Test that a failure while streaming content is a download error."""
    downloader = MagicMock()
    downloader.readinto = AsyncMock(side_effect=ServiceRequestError("Connection reset"))
    mock_blob_client.download_blob = AsyncMock(return_value=downloader)

    download = await store.open_blob("demoblob1", "demofile1.txt")

    with pytest.raises(DownloadError):
        await download.readinto(io.BytesIO())


@pytest.mark.asyncio
async def test_connect_rejects_container_scoped_sas(store, mock_service):
    """Test that credentials without account-level rights fail at connect."""
    mock_service.get_account_information.side_effect = HttpResponseError(
        "This request is not authorized to perform this operation."
    )

    with pytest.raises(StorageConnectionError, match="testaccount") as exc_info:
        await store.connect()

    assert exc_info.value.step == "connect"
