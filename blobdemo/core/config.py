"""Configuration management for the blob storage round-trip demo.

This module provides centralized configuration management using pydantic-settings.
All configuration is loaded from environment variables or .env files with
validation. Credentials are never embedded in code.
"""

import logging
import re
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONTAINER_PREFIX_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are loaded from environment variables or .env files.
    Credentials for the selected backend are required; everything else
    has a default matching the walkthrough.

    Attributes:
        # Storage Backend (1 field)
        storage_backend: Which storage service to talk to ("azure" or "s3")

        # Azure Blob Storage Configuration (1 field)
        azure_storage_connection_string: Storage account connection string

        # S3 Configuration (4 fields)
        s3_endpoint_url: S3 endpoint URL (None for the AWS default)
        s3_access_key: S3 access key ID
        s3_secret_key: S3 secret access key
        s3_region: Region for bucket creation

        # Walkthrough Configuration (5 fields)
        container_prefix: Fixed prefix of generated container names
        file_prefix: Fixed prefix of generated local file names
        file_content: Text written to the local source file
        local_path: Directory for the uploaded and downloaded files
        interactive: Pause for operator confirmation between steps

        # Application Configuration (1 field)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Backend (1 field)
    storage_backend: Literal["azure", "s3"] = Field(
        default="azure",
        description="Storage service backend (azure or s3)",
    )

    # Azure Blob Storage Configuration (1 field)
    azure_storage_connection_string: Optional[str] = Field(
        default=None,
        description="Azure storage account connection string",
    )

    # S3 Configuration (4 fields)
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="S3 endpoint URL (e.g., http://localhost:9000 for MinIO)",
    )
    s3_access_key: Optional[str] = Field(
        default=None,
        description="S3 access key ID",
    )
    s3_secret_key: Optional[str] = Field(
        default=None,
        description="S3 secret access key",
    )
    s3_region: str = Field(
        default="us-east-1",
        description="S3 region used when creating buckets",
    )

    # Walkthrough Configuration (5 fields)
    container_prefix: str = Field(
        default="demoblob",
        description="Prefix of generated container names",
        min_length=1,
        max_length=26,
    )
    file_prefix: str = Field(
        default="demofile",
        description="Prefix of generated local file names",
    )
    file_content: str = Field(
        default="Hello, World!",
        description="Text written to the local source file",
    )
    local_path: Path = Field(
        default=Path("azdata"),
        description="Directory for uploaded and downloaded files",
    )
    interactive: bool = Field(
        default=True,
        description="Pause for operator confirmation between steps",
    )

    # Application Configuration (1 field)
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    @field_validator("container_prefix")
    @classmethod
    def validate_container_prefix(cls, v: str) -> str:
        """Validate that the prefix is usable in a container or bucket name.

        Container names are limited to lowercase letters, digits and
        hyphens, and a 36 character UUID is appended to the prefix, so
        the prefix may be at most 26 characters long.

        Args:
            v: The container_prefix value

        Returns:
            The validated value

        Raises:
            ValueError: If the prefix contains invalid characters
        """
        if not CONTAINER_PREFIX_PATTERN.match(v):
            raise ValueError(
                "container_prefix must start with a lowercase letter or digit "
                "and contain only lowercase letters, digits and hyphens"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log_level and reject unknown level names."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def validate_backend_credentials(self) -> "Settings":
        """Require the credentials of the selected backend.

        Raises:
            ValueError: If the selected backend is missing credentials
        """
        if self.storage_backend == "azure" and not self.azure_storage_connection_string:
            raise ValueError(
                "azure_storage_connection_string is required when storage_backend is 'azure'"
            )
        if self.storage_backend == "s3" and not (self.s3_access_key and self.s3_secret_key):
            raise ValueError(
                "s3_access_key and s3_secret_key are required when storage_backend is 's3'"
            )
        return self
