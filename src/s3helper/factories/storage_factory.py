"""
Factory for creating storage instances.
"""

from pydantic import ValidationError as ConfigValidationError

from s3helper.storage.cloud_storage import ConfigurationError, StorageConfig
from s3helper.storage.s3_storage import S3Storage
from s3helper.utils.env_config import AppSettings


def create_storage(settings: AppSettings) -> S3Storage:
    """Create storage based on configuration."""
    config_dict = settings.get_storage_config()

    bucket_name = config_dict["bucket_name"]
    if not bucket_name or not bucket_name.strip():
        raise ConfigurationError("S3_BUCKET must be set", error_code="MISSING_BUCKET")

    # Blank credentials fall through to boto3's default credential chain
    for name in ("access_key_id", "secret_access_key", "endpoint_url"):
        value = config_dict.get(name)
        if value is not None and not value.strip():
            config_dict[name] = None

    try:
        config = StorageConfig(**config_dict)
    except ConfigValidationError as e:
        raise ConfigurationError(
            f"Invalid storage settings: {e}",
            error_code="INVALID_SETTINGS",
            details={"errors": e.errors()},
        ) from e
    return S3Storage(config)
