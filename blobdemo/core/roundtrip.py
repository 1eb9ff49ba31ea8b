"""Storage round-trip walkthrough.

This module provides StorageRoundTripDemo, which walks through the basic
life of a blob:

- Connect to the storage account
- Create a uniquely named container
- Write a local text file
- Upload it as a blob
- List the blobs in the container
- Download the blob to a new local file

Each step is narrated through an output sink. In interactive mode the demo
pauses for the operator between steps. Any failure aborts the remaining
steps; nothing created before the failure is cleaned up.
"""

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

import click

from blobdemo.core.config import Settings
from blobdemo.core.exceptions import DemoStepError, LocalIOError
from blobdemo.storage.base import BlobStore

logger = logging.getLogger(__name__)

CONTINUE_PROMPT = "Press 'Enter' to continue."


def generate_container_name(prefix: str) -> str:
    """Return ``prefix`` followed by a fresh UUID4."""
    return f"{prefix}{uuid.uuid4()}"


def generate_file_name(prefix: str) -> str:
    """Return ``prefix`` followed by a fresh UUID4 and the .txt extension."""
    return f"{prefix}{uuid.uuid4()}.txt"


def derive_download_path(source_path: str) -> str:
    """Derive the download path from the uploaded file's path.

    The first occurrence of ".txt" in the whole path string is replaced
    with "DOWNLOADED.txt", so ``azdata/demofileABC.txt`` becomes
    ``azdata/demofileABCDOWNLOADED.txt``. A directory containing ".txt"
    earlier in the path gets rewritten instead of the file name.

    Args:
        source_path: Path of the uploaded local file

    Returns:
        Path for the downloaded copy
    """
    return source_path.replace(".txt", "DOWNLOADED.txt", 1)


@dataclass
class RoundTripResult:
    """What a completed round trip created."""

    container_name: str
    blob_name: str
    blob_url: str
    source_path: str
    download_path: str
    listed_blobs: List[str] = field(default_factory=list)


class StorageRoundTripDemo:
    """Create a container, upload a file, list it and download it back.

    Attributes:
        settings: Application settings
        store: Storage backend the walkthrough runs against
    """

    def __init__(
        self,
        settings: Settings,
        store: BlobStore,
        echo: Optional[Callable[[str], None]] = None,
        pause: Optional[Callable[[str], None]] = None,
    ) -> None:
        """Initialize the demo.

        Args:
            settings: Application settings
            store: Storage backend (the caller owns its lifetime)
            echo: Output sink for operator narration (default: click.echo)
            pause: Operator confirmation, only called in interactive mode
                (default: click.pause)
        """
        self.settings = settings
        self.store = store
        self._echo = echo or click.echo
        self._pause = pause or click.pause

    def _wait_for_operator(self) -> None:
        if self.settings.interactive:
            self._pause(CONTINUE_PROMPT)

    async def run(self) -> RoundTripResult:
        """Run the whole walkthrough once.

        Returns:
            RoundTripResult describing the container, blob and files

        Raises:
            StorageConnectionError: If the account cannot be reached
            ContainerCreationError: If the container cannot be created
            LocalIOError: If a local file cannot be written or read
            UploadError: If the upload fails
            ListingError: If the container cannot be listed
            DownloadError: If the download fails
        """
        store = self.store

        await store.connect()

        # Create a unique container
        container_name = generate_container_name(self.settings.container_prefix)
        await store.create_container(container_name)
        self._echo(
            f"A container named '{container_name}' has been created. "
            "\nTake a minute and verify in the portal."
            "\nNext a file will be created and uploaded to the container."
        )
        self._wait_for_operator()

        # Write the local file
        file_name = generate_file_name(self.settings.file_prefix)
        source_path = str(self.settings.local_path / file_name)
        try:
            self.settings.local_path.mkdir(parents=True, exist_ok=True)
            Path(source_path).write_text(self.settings.file_content, encoding="utf-8")
        except OSError as e:
            raise LocalIOError(
                f"Failed to write {source_path}: {e}", step="write_file"
            ) from e
        logger.debug(f"Wrote {len(self.settings.file_content)} characters to {source_path}")

        # Upload it under the same name
        blob_url = store.blob_url(container_name, file_name)
        self._echo(f"Uploading to Blob storage as blob:\n\t {blob_url}\n")
        try:
            with open(source_path, "rb") as data:
                await store.upload_blob(container_name, file_name, data, overwrite=True)
        except DemoStepError:
            raise
        except OSError as e:
            raise LocalIOError(f"Failed to read {source_path}: {e}", step="upload") from e
        self._echo("\nThe file was uploaded. We'll verify by listing the blobs next.")
        self._wait_for_operator()

        # List blobs
        self._echo("Listing blobs...")
        listed_blobs = []
        async for blob_name in store.list_blobs(container_name):
            self._echo(f"\t{blob_name}")
            listed_blobs.append(blob_name)
        logger.debug(f"Container {container_name} holds {len(listed_blobs)} blobs")
        self._echo(
            "\nYou can also verify by looking inside the container in the portal."
            "\nNext the blob will be downloaded with an altered file name."
        )
        self._wait_for_operator()

        # Download to a derived path
        download_path = derive_download_path(source_path)
        self._echo(f"\nDownloading blob to\n\t{download_path}\n")
        # The local file is only created once the service has answered
        download = await store.open_blob(container_name, file_name)
        try:
            with open(download_path, "wb") as destination:
                await download.readinto(destination)
        except DemoStepError:
            raise
        except OSError as e:
            raise LocalIOError(
                f"Failed to write {download_path}: {e}", step="download"
            ) from e
        self._echo("\nLocate the local file to verify it was downloaded.")
        self._wait_for_operator()

        return RoundTripResult(
            container_name=container_name,
            blob_name=file_name,
            blob_url=blob_url,
            source_path=source_path,
            download_path=download_path,
            listed_blobs=listed_blobs,
        )
