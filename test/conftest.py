import tempfile
from collections.abc import Generator
from pathlib import Path

import boto3
import pytest
import structlog
from moto import mock_aws

from s3helper.filestore import Filestore
from s3helper.storage import S3Storage, StorageConfig

TEST_BUCKET_NAME = "s3helper-test-bucket"
TEST_REGION = "us-east-1"


@pytest.fixture(autouse=True, scope="session")
def stdlib_structlog() -> None:
    """Route structlog through stdlib logging so pytest captures it off stdout."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.KeyValueRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep boto3 away from real credentials and real buckets."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)


@pytest.fixture
def temp_dir() -> Generator[Path]:
    with tempfile.TemporaryDirectory() as tmpdirname:
        yield Path(tmpdirname)


@pytest.fixture
def mocked_aws() -> Generator[None]:
    with mock_aws():
        boto3.client("s3", region_name=TEST_REGION).create_bucket(Bucket=TEST_BUCKET_NAME)
        yield


@pytest.fixture
def storage_config() -> StorageConfig:
    return StorageConfig(
        bucket_name=TEST_BUCKET_NAME,
        region=TEST_REGION,
        access_key_id="testing",
        secret_access_key="testing",
    )


@pytest.fixture
def storage(mocked_aws: None, storage_config: StorageConfig) -> S3Storage:
    return S3Storage(storage_config)


@pytest.fixture
def filestore(storage: S3Storage) -> Generator[type[Filestore]]:
    Filestore.configure(storage)
    yield Filestore
    Filestore.reset()


@pytest.fixture
def text_file(temp_dir: Path) -> Path:
    path = temp_dir / "foo.txt"
    path.write_text("Lorem ipsum dolor sit amet, consectetur adipiscing elit.")
    return path


@pytest.fixture
def other_text_file(temp_dir: Path) -> Path:
    path = temp_dir / "bar.txt"
    path.write_text("Sed do eiusmod tempor incididunt ut labore et dolore magna aliqua.")
    return path
