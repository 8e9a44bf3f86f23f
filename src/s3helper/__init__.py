"""
s3helper: a small file store facade over one S3 bucket.
"""

from .filestore import Filestore
from .storage import (
    FileInfo,
    S3Storage,
    StorageConfig,
    StorageError,
    StorageFileNotFoundError,
    StoragePermission,
)

__version__ = "0.1.0"

__all__ = [
    "Filestore",
    "S3Storage",
    "StorageConfig",
    "StoragePermission",
    "FileInfo",
    "StorageError",
    "StorageFileNotFoundError",
]
