"""
S3 file store storage layer.

Configuration, data types, errors and the boto3-backed implementation used
by the Filestore facade. Works with AWS S3 and S3-compatible services such
as MinIO, CloudFlare R2, DigitalOcean Spaces or Wasabi.
"""

from .cloud_storage import (
    ConfigurationError,
    FileInfo,
    NetworkError,
    StorageConfig,
    StorageError,
    StorageFileNotFoundError,
    StoragePermission,
    StoragePermissionError,
    ValidationError,
)
from .file_utils import FileUtils
from .s3_storage import S3Storage


__all__ = [
    # Configuration
    "StorageConfig",
    # Implementation
    "S3Storage",
    # Data models and enums
    "FileInfo",
    "StoragePermission",
    # Exceptions
    "StorageError",
    "StorageFileNotFoundError",
    "StoragePermissionError",
    "NetworkError",
    "ConfigurationError",
    "ValidationError",
    # Utilities
    "FileUtils",
]
