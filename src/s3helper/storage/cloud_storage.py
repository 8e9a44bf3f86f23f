"""
Shared types for the S3 file store.

This module defines the configuration model, the file information record,
canned access permissions and the exception hierarchy used by the storage
implementation and the Filestore facade.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


DEFAULT_HOST = "s3.amazonaws.com"


class StoragePermission(str, Enum):
    """Canned ACLs accepted on write."""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"


@dataclass
class FileInfo:
    """Information about a stored file."""

    key: str
    size: int
    content_type: str
    last_modified: datetime | None
    etag: str
    metadata: dict[str, str] = field(default_factory=dict)
    public_url: str | None = None


class StorageConfig(BaseModel):
    """Configuration for one S3 bucket."""

    bucket_name: str
    host: str = DEFAULT_HOST
    region: str | None = "us-east-1"
    endpoint_url: str | None = None  # Only for non-AWS S3 services
    access_key_id: str | None = None
    secret_access_key: str | None = None

    use_ssl: bool = True
    public_url_scheme: str = "http"
    default_permission: StoragePermission = StoragePermission.PUBLIC_READ

    max_attempts: int = Field(default=3, ge=1, le=20)
    max_pool_connections: int = Field(default=10, ge=1, le=50)

    @field_validator("bucket_name")
    @classmethod
    def validate_bucket_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Bucket name must be at least 3 characters")
        return v

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        v = v.strip().strip("/")
        return v or DEFAULT_HOST

    @field_validator("public_url_scheme")
    @classmethod
    def validate_scheme(cls, v: str) -> str:
        v = v.lower()
        if v not in ("http", "https"):
            raise ValueError("Public URL scheme must be http or https")
        return v

    def resolved_endpoint_url(self) -> str | None:
        """
        Endpoint passed to boto3.

        An explicit endpoint wins. Otherwise AWS hosts are left to boto3's
        own resolution and any other host is treated as an S3-compatible
        service reachable at that host.
        """
        if self.endpoint_url:
            return self.endpoint_url
        if self.host.endswith("amazonaws.com"):
            return None
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.host}"


class StorageError(Exception):
    """Base exception for storage operations."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}


class StorageFileNotFoundError(StorageError):
    """Key not found in the bucket."""

    pass


class StoragePermissionError(StorageError):
    """Permission denied for storage operation."""

    pass


class NetworkError(StorageError):
    """Network-related storage error."""

    pass


class ConfigurationError(StorageError):
    """Storage settings are missing or invalid."""

    pass


class ValidationError(StorageError):
    """Invalid argument passed to a storage operation."""

    pass


__all__ = [
    "DEFAULT_HOST",
    "StorageConfig",
    "StoragePermission",
    "FileInfo",
    "StorageError",
    "StorageFileNotFoundError",
    "StoragePermissionError",
    "NetworkError",
    "ConfigurationError",
    "ValidationError",
]
