"""
S3 file store implementation.

This module wraps boto3's client and resource APIs for a single bucket and
exposes the small set of file operations the Filestore facade offers:
listing, reading, writing, renaming, deleting, collision-free naming and
public URL building. It works with AWS S3 and any S3-compatible service.
"""

import os
import threading
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Union
from urllib.parse import quote

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    EndpointConnectionError,
    NoCredentialsError,
)

from .cloud_storage import (
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


logger = structlog.get_logger(__name__)

WriteSource = Union[str, os.PathLike, bytes, bytearray, BinaryIO]

_NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404"}
_NO_BUCKET_CODES = {"NoSuchBucket", "NotFound", "404"}
_PERMISSION_CODES = {"AccessDenied", "Forbidden", "403", "InvalidAccessKeyId", "SignatureDoesNotMatch"}
_NETWORK_CODES = {"RequestTimeout", "ServiceUnavailable", "SlowDown", "503"}


class S3Storage:
    """
    File operations against one S3 bucket.

    Client, resource and bucket handles are created on first use. boto3
    clients are thread-safe, so one instance can be shared by every thread
    in the process.
    """

    def __init__(self, config: StorageConfig):
        """Initialize S3 storage with configuration."""
        self.config = config
        self._session = None
        self._s3_client = None
        self._s3_resource = None
        self._bucket = None
        self._connect_lock = threading.Lock()
        self.file_utils = FileUtils()

    @property
    def bucket_name(self) -> str:
        return self.config.bucket_name

    def connect(self) -> None:
        """Create the boto3 session, client and bucket resource."""
        self._session = boto3.Session(
            aws_access_key_id=self.config.access_key_id,
            aws_secret_access_key=self.config.secret_access_key,
            region_name=self.config.region,
        )

        boto_config = Config(
            max_pool_connections=self.config.max_pool_connections,
            retries={
                "max_attempts": self.config.max_attempts,
                "mode": "standard",
            },
        )

        client_kwargs: Dict[str, Any] = {
            "config": boto_config,
            "region_name": self.config.region,
            "use_ssl": self.config.use_ssl,
        }

        endpoint_url = self.config.resolved_endpoint_url()
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url

        self._s3_client = self._session.client("s3", **client_kwargs)
        self._s3_resource = self._session.resource("s3", **client_kwargs)
        self._bucket = self._s3_resource.Bucket(self.config.bucket_name)

        logger.info("s3 storage configured", bucket=self.bucket_name, endpoint=endpoint_url)

    def disconnect(self) -> None:
        """Close the underlying HTTP connections."""
        with self._connect_lock:
            if self._s3_client is None:
                return
            self._s3_client.close()
            self._bucket = None
            self._s3_client = None
            self._s3_resource = None
            self._session = None
        logger.info("s3 storage closed", bucket=self.bucket_name)

    def _ensure_connected(self) -> None:
        if self._bucket is None:
            with self._connect_lock:
                if self._bucket is None:
                    self.connect()

    @property
    def client(self):
        self._ensure_connected()
        return self._s3_client

    @property
    def bucket(self):
        """The boto3 Bucket resource (rarely needed directly)."""
        self._ensure_connected()
        return self._bucket

    def bucket_exists(self) -> bool:
        """Check that the configured bucket is reachable."""
        try:
            self.client.head_bucket(Bucket=self.bucket_name)
            return True
        except ClientError as e:
            if self._error_code(e) in _NO_BUCKET_CODES:
                return False
            self._handle_client_error(e, f"check bucket {self.bucket_name}")
        except BotoCoreError as e:
            self._handle_botocore_error(e, f"check bucket {self.bucket_name}")

    # Listing

    def ls(self, dirpath: Optional[str] = None, filesmatch: str = "*") -> List[str]:
        """
        List the simple files directly inside a directory.

        Subdirectories are ignored. ``dirpath`` must not have a leading
        slash; the trailing slash is optional. ``filesmatch`` is a glob
        supporting ``*`` and ``?``.

        Returns:
            File names relative to ``dirpath``
        """
        prefix = self.file_utils.normalize_dirpath(dirpath)
        offset = len(prefix)
        names = []
        for page in self._list_pages(prefix, delimiter="/"):
            for obj in page.get("Contents", []):
                name = obj["Key"][offset:]
                if name:
                    names.append(name)
        return self.file_utils.filter_names(names, filesmatch)

    def lsdir(self, dirpath: Optional[str] = None) -> List[str]:
        """
        List the immediate subdirectories of a directory.

        Returns:
            Directory names relative to ``dirpath``, each with a trailing slash
        """
        prefix = self.file_utils.normalize_dirpath(dirpath)
        offset = len(prefix)
        dirs = []
        for page in self._list_pages(prefix, delimiter="/"):
            for common in page.get("CommonPrefixes", []):
                dirs.append(common["Prefix"][offset:])
        return dirs

    def list_keys(self, prefix: str = "") -> List[str]:
        """List every key starting with ``prefix``, at any depth."""
        keys = []
        for page in self._list_pages(prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return keys

    # Object access

    def write(
        self,
        path: str,
        file: WriteSource,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
        permission: Optional[StoragePermission] = None,
    ) -> FileInfo:
        """
        Store a file under ``path``, replacing any existing object.

        ``file`` may be a local file path, raw bytes or a readable binary
        file object. Objects are public-read unless configured otherwise.
        """
        self._validate_key(path)
        if content_type is None:
            content_type = self.file_utils.get_content_type(path)

        put_args: Dict[str, Any] = {
            "ContentType": content_type,
            "ACL": StoragePermission(permission or self.config.default_permission).value,
        }
        if metadata:
            put_args["Metadata"] = metadata

        try:
            if isinstance(file, (str, os.PathLike)):
                local_path = Path(file)
                if not local_path.is_file():
                    raise ValidationError(f"Not a file: {local_path}")
                with open(local_path, "rb") as f:
                    self.client.put_object(Bucket=self.bucket_name, Key=path, Body=f, **put_args)
            elif isinstance(file, (bytes, bytearray)):
                self.client.put_object(Bucket=self.bucket_name, Key=path, Body=bytes(file), **put_args)
            elif hasattr(file, "read"):
                self.client.put_object(Bucket=self.bucket_name, Key=path, Body=file, **put_args)
            else:
                raise ValidationError(f"Unsupported source for {path}: {type(file).__name__}")
        except ClientError as e:
            self._handle_client_error(e, f"write {path}")
        except BotoCoreError as e:
            self._handle_botocore_error(e, f"write {path}")

        logger.debug("object written", key=path, content_type=content_type)
        return self.stat(path)

    def read(self, path: str) -> bytes:
        """Read an object's content."""
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=path)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()
        except ClientError as e:
            self._handle_client_error(e, f"read {path}")
        except BotoCoreError as e:
            self._handle_botocore_error(e, f"read {path}")

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read an object's content as text."""
        return self.read(path).decode(encoding)

    def exists(self, path: str) -> bool:
        """Check whether an object exists."""
        try:
            self.client.head_object(Bucket=self.bucket_name, Key=path)
            return True
        except ClientError as e:
            if self._error_code(e) in _NOT_FOUND_CODES:
                return False
            self._handle_client_error(e, f"check existence of {path}")
        except BotoCoreError as e:
            self._handle_botocore_error(e, f"check existence of {path}")

    def stat(self, path: str) -> FileInfo:
        """Get information about a stored object."""
        try:
            response = self.client.head_object(Bucket=self.bucket_name, Key=path)
        except ClientError as e:
            self._handle_client_error(e, f"get info for {path}")
        except BotoCoreError as e:
            self._handle_botocore_error(e, f"get info for {path}")

        return FileInfo(
            key=path,
            size=response.get("ContentLength", 0),
            content_type=response.get("ContentType", FileUtils.DEFAULT_CONTENT_TYPE),
            last_modified=response.get("LastModified"),
            etag=response.get("ETag", "").strip('"'),
            metadata=response.get("Metadata", {}),
            public_url=self.public_url(path),
        )

    def delete(self, path: str) -> None:
        """Remove an object. Removing a missing object is not an error."""
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=path)
        except ClientError as e:
            self._handle_client_error(e, f"delete {path}")
        except BotoCoreError as e:
            self._handle_botocore_error(e, f"delete {path}")
        logger.debug("object deleted", key=path)

    def copy(
        self,
        source: str,
        destination: str,
        permission: Optional[StoragePermission] = None,
    ) -> FileInfo:
        """Copy an object within the bucket (server side)."""
        self._validate_key(destination)
        try:
            self.client.copy_object(
                CopySource={"Bucket": self.bucket_name, "Key": source},
                Bucket=self.bucket_name,
                Key=destination,
                ACL=StoragePermission(permission or self.config.default_permission).value,
            )
        except ClientError as e:
            self._handle_client_error(e, f"copy {source} to {destination}")
        except BotoCoreError as e:
            self._handle_botocore_error(e, f"copy {source} to {destination}")
        return self.stat(destination)

    def rename(self, source: str, destination: str) -> FileInfo:
        """Move an object to a new key, replacing any existing object there."""
        if source == destination:
            return self.stat(source)
        file_info = self.copy(source, destination)
        self.delete(source)
        logger.info("object renamed", source=source, destination=destination)
        return file_info

    # Collision-free naming

    def find_available_name(self, path: str) -> str:
        """
        Find a key close to ``path`` that is not in use.

        ``path`` is returned as is when free. Otherwise a numeric suffix is
        inserted before the extension (``notes.txt`` -> ``notes-1.txt``),
        or incremented if ``path`` already has one.

        This is a check only. Callers that write to the returned key must
        hold the naming lock (see ``Filestore.writenc``) to avoid races.
        """
        if not self.exists(path):
            return path
        taken = set(self.list_keys(self.file_utils.candidate_prefix(path)))
        taken.add(path)
        return self.file_utils.next_available_name(path, taken)

    # Public URLs

    def uribase(self) -> str:
        """Base URL that public keys are served under."""
        return f"{self.config.public_url_scheme}://{self.bucket_name}.{self.config.host}/"

    def public_url(self, path: str) -> str:
        """Public access URL for a key."""
        return self.uribase() + quote(path, safe="/")

    # Private helper methods

    def _list_pages(self, prefix: str, delimiter: Optional[str] = None) -> Iterator[Dict[str, Any]]:
        """Yield ListObjectsV2 pages, translating errors."""
        params: Dict[str, Any] = {"Bucket": self.bucket_name, "Prefix": prefix}
        if delimiter:
            params["Delimiter"] = delimiter
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(**params):
                yield page
        except ClientError as e:
            self._handle_client_error(e, f"list {prefix or '/'}")
        except BotoCoreError as e:
            self._handle_botocore_error(e, f"list {prefix or '/'}")

    def _validate_key(self, path: str) -> None:
        if not path or path.startswith("/"):
            raise ValidationError(f"Invalid key: {path!r}")

    @staticmethod
    def _error_code(error: ClientError) -> str:
        return str(error.response.get("Error", {}).get("Code", "UNKNOWN"))

    def _handle_client_error(self, error: ClientError, operation: str) -> None:
        """Convert an S3 client error into a storage exception."""
        error_code = self._error_code(error)
        status_code = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        message = error.response.get("Error", {}).get("Message", str(error))

        logger.warning("s3 request failed", operation=operation, error_code=error_code, status_code=status_code)

        if error_code in _NOT_FOUND_CODES:
            raise StorageFileNotFoundError(
                f"Not found during {operation}",
                error_code=error_code,
                status_code=status_code,
            ) from error
        if error_code in _PERMISSION_CODES:
            raise StoragePermissionError(
                f"Access denied during {operation}",
                error_code=error_code,
                status_code=status_code,
            ) from error
        if error_code in _NETWORK_CODES:
            raise NetworkError(
                f"Network error during {operation}: {message}",
                error_code=error_code,
                status_code=status_code,
            ) from error
        raise StorageError(
            f"S3 error during {operation}: {message}",
            error_code=error_code,
            status_code=status_code,
        ) from error

    def _handle_botocore_error(self, error: BotoCoreError, operation: str) -> None:
        """Convert a client-side botocore failure into a storage exception."""
        logger.warning("s3 request failed", operation=operation, error=str(error))

        if isinstance(error, NoCredentialsError):
            raise StoragePermissionError(
                "S3 credentials not found",
                error_code="NO_CREDENTIALS",
                details={"error": str(error)},
            ) from error
        if isinstance(error, EndpointConnectionError):
            raise NetworkError(
                f"Cannot reach S3 endpoint during {operation}",
                error_code="ENDPOINT_CONNECTION",
                details={"error": str(error)},
            ) from error
        raise StorageError(
            f"Unexpected error during {operation}: {error}",
            details={"error": str(error)},
        ) from error
