"""CLI entry point for the blob storage round-trip demo.

This module provides the command-line interface for the walkthrough.

Usage:
    # Run the walkthrough, pausing between steps
    python -m blobdemo run

    # Run without pausing, against an S3-compatible service
    python -m blobdemo run --no-interactive --backend s3

Credentials come from the environment or a .env file
(AZURE_STORAGE_CONNECTION_STRING, or S3_ACCESS_KEY / S3_SECRET_KEY).
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from blobdemo import __version__
from blobdemo.core.config import Settings
from blobdemo.core.exceptions import DemoStepError
from blobdemo.core.roundtrip import StorageRoundTripDemo
from blobdemo.storage.factory import create_blob_store

logger = logging.getLogger(__name__)


@click.group()
def cli() -> None:
    """Blob Storage Demo - create, upload, list and download a blob."""
    pass


@cli.command()
@click.option(
    "--backend",
    "-b",
    type=click.Choice(["azure", "s3"]),
    default=None,
    help="Storage backend (default: STORAGE_BACKEND or azure)",
)
@click.option(
    "--local-path",
    "-p",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the uploaded and downloaded files",
)
@click.option(
    "--interactive/--no-interactive",
    default=None,
    help="Pause between steps (default: INTERACTIVE or on)",
)
def run(
    backend: Optional[str],
    local_path: Optional[Path],
    interactive: Optional[bool],
) -> None:
    """Run the storage round trip once.

    Exits with status 1 if any step fails and 2 if the configuration
    is invalid.

    Examples:
        python -m blobdemo run
        python -m blobdemo run --no-interactive --local-path /tmp/azdata
    """
    overrides = {
        "storage_backend": backend,
        "local_path": local_path,
        "interactive": interactive,
    }
    try:
        settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        click.echo(f"Invalid configuration:\n{e}", err=True)
        sys.exit(2)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Backend: {settings.storage_backend}")
    logger.info(f"Local path: {settings.local_path}")

    click.echo("Blob Storage Demo\n")

    async def run_demo() -> None:
        """Run the walkthrough and release the storage client."""
        async with create_blob_store(settings) as store:
            demo = StorageRoundTripDemo(settings, store)
            result = await demo.run()

        logger.info(f"Round trip complete: {result.download_path}")

    try:
        asyncio.run(run_demo())
    except DemoStepError as e:
        logger.debug("Round trip aborted", exc_info=True)
        click.echo(f"Step '{e.step}' failed ({e.kind}): {e}", err=True)
        sys.exit(1)

    if settings.interactive:
        click.pause("Press enter to exit the sample application.")


@cli.command()
def version() -> None:
    """Show version information."""
    print(f"Blob Storage Demo v{__version__}")
    print("Object storage round-trip walkthrough")


if __name__ == "__main__":
    cli()
