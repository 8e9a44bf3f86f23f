"""
Process-wide file store facade.

``Filestore`` exposes the bucket operations as static methods backed by a
single lazily created ``S3Storage``. The storage is built from environment
settings on first use:

    S3_ACCESS_KEY_ID      access key
    S3_SECRET_ACCESS_KEY  secret key
    S3_BUCKET             bucket name, e.g. "my-amazon-files"
    S3_HOST               service host, e.g. "s3-ap-southeast-1.amazonaws.com"

Example:

    from s3helper import Filestore

    Filestore.write("reports/q1.txt", "/tmp/q1.txt")
    Filestore.ls("reports", "*.txt")
    Filestore.writenc("reports/q1.txt", b"...")   # -> "reports/q1-1.txt"
"""

import threading
from typing import Dict, List, Optional

import structlog

from .factories.storage_factory import create_storage
from .storage import FileInfo, S3Storage, StoragePermission
from .storage.s3_storage import WriteSource
from .utils.env_config import get_settings, reload_settings


logger = structlog.get_logger(__name__)


class Filestore:
    """Static facade over the shared S3 storage."""

    _storage: Optional[S3Storage] = None
    _init_lock = threading.Lock()
    # Serializes check-then-write for the no-clobber operations
    _naming_lock = threading.Lock()

    @classmethod
    def storage(cls) -> S3Storage:
        """Get the shared storage, creating it on first use."""
        if cls._storage is None:
            with cls._init_lock:
                if cls._storage is None:
                    cls._storage = create_storage(get_settings())
                    logger.info("filestore initialized", bucket=cls._storage.bucket_name)
        return cls._storage

    @classmethod
    def configure(cls, storage: S3Storage) -> None:
        """Use an explicitly built storage instead of the environment."""
        with cls._init_lock:
            cls._storage = storage

    @classmethod
    def reset(cls) -> None:
        """
        Drop the shared storage so the next call rebuilds it.

        Settings are re-read from the environment, so rotated credentials
        or a new bucket take effect on the next call.
        """
        with cls._init_lock:
            if cls._storage is not None:
                cls._storage.disconnect()
            cls._storage = None
            reload_settings()

    @classmethod
    def bucket(cls):
        """The boto3 Bucket resource behind the shared storage."""
        return cls.storage().bucket

    @classmethod
    def bucket_exists(cls) -> bool:
        return cls.storage().bucket_exists()

    @staticmethod
    def ls(dirpath: Optional[str] = None, filesmatch: str = "*") -> List[str]:
        """
        List simple files in a directory; subdirectories are ignored.

        ``dirpath`` must not have a leading slash. File matching supports
        basic globbing (``*`` and ``?``).
        """
        return Filestore.storage().ls(dirpath, filesmatch)

    @staticmethod
    def lsdir(dirpath: Optional[str] = None) -> List[str]:
        """List the immediate subdirectories of a directory."""
        return Filestore.storage().lsdir(dirpath)

    @staticmethod
    def write(
        path: str,
        file: WriteSource,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
        permission: Optional[StoragePermission] = None,
    ) -> FileInfo:
        """Store a file under the key ``path`` (no leading slash)."""
        return Filestore.storage().write(path, file, content_type, metadata, permission)

    @staticmethod
    def read(path: str) -> bytes:
        return Filestore.storage().read(path)

    @staticmethod
    def read_text(path: str, encoding: str = "utf-8") -> str:
        return Filestore.storage().read_text(path, encoding)

    @staticmethod
    def exists(path: str) -> bool:
        return Filestore.storage().exists(path)

    @staticmethod
    def stat(path: str) -> FileInfo:
        return Filestore.storage().stat(path)

    @staticmethod
    def delete(path: str) -> None:
        Filestore.storage().delete(path)

    @staticmethod
    def rename(source: str, destination: str) -> FileInfo:
        return Filestore.storage().rename(source, destination)

    @staticmethod
    def find_available_name(path: str) -> str:
        """Return ``path`` or the first free suffixed variant of it."""
        return Filestore.storage().find_available_name(path)

    @classmethod
    def writenc(
        cls,
        path: str,
        file: WriteSource,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
        permission: Optional[StoragePermission] = None,
    ) -> str:
        """
        Write without clobbering an existing object.

        Returns:
            The key actually written
        """
        storage = cls.storage()
        with cls._naming_lock:
            name = storage.find_available_name(path)
            storage.write(name, file, content_type, metadata, permission)
        if name != path:
            logger.info("write redirected to free name", requested=path, key=name)
        return name

    @classmethod
    def renamenc(cls, source: str, destination: str) -> str:
        """
        Rename without clobbering an existing object.

        Returns:
            The key the object ended up under
        """
        storage = cls.storage()
        with cls._naming_lock:
            name = storage.find_available_name(destination)
            storage.rename(source, name)
        return name

    @staticmethod
    def uribase() -> str:
        """Base URL that public keys are served under."""
        return Filestore.storage().uribase()

    @staticmethod
    def public_url(path: str) -> str:
        return Filestore.storage().public_url(path)
