"""
Environment-based configuration for s3helper.

Settings come entirely from environment variables, optionally seeded from a
``.env`` file in the working directory.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

# Load environment variables from .env file
env_file = Path.cwd() / ".env"
if env_file.exists():
    load_dotenv(env_file)
    logger.info(f"Loaded environment variables from: {env_file}")


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable."""
    value = os.getenv(key, "").lower()
    return value in ("true", "1", "yes", "on") if value else default


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer value from environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


@dataclass
class AppSettings:
    """Application settings from environment variables."""

    # Storage Configuration
    s3_access_key_id: Optional[str] = field(default_factory=lambda: os.getenv("S3_ACCESS_KEY_ID"))
    s3_secret_access_key: Optional[str] = field(default_factory=lambda: os.getenv("S3_SECRET_ACCESS_KEY"))
    s3_bucket: Optional[str] = field(default_factory=lambda: os.getenv("S3_BUCKET"))
    s3_host: str = field(default_factory=lambda: os.getenv("S3_HOST", "s3.amazonaws.com"))
    s3_region: str = field(default_factory=lambda: os.getenv("S3_REGION", "us-east-1"))
    s3_endpoint_url: Optional[str] = field(default_factory=lambda: os.getenv("S3_ENDPOINT_URL"))
    s3_use_ssl: bool = field(default_factory=lambda: get_env_bool("S3_USE_SSL", True))
    s3_public_url_scheme: str = field(default_factory=lambda: os.getenv("S3_PUBLIC_URL_SCHEME", "http"))
    s3_default_acl: str = field(default_factory=lambda: os.getenv("S3_DEFAULT_ACL", "public-read"))
    s3_max_attempts: int = field(default_factory=lambda: get_env_int("S3_MAX_ATTEMPTS", 3))

    # Logging Configuration
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    log_json_format: bool = field(default_factory=lambda: get_env_bool("LOG_JSON_FORMAT", False))

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.log_level = self.log_level.upper()
        if not self.s3_bucket:
            logger.warning("S3_BUCKET is not set; storage operations will fail")
        if bool(self.s3_access_key_id) != bool(self.s3_secret_access_key):
            logger.warning("Only one of S3_ACCESS_KEY_ID / S3_SECRET_ACCESS_KEY is set")

    def get_storage_config(self) -> dict:
        """Get storage configuration as a dictionary."""
        return {
            "access_key_id": self.s3_access_key_id,
            "secret_access_key": self.s3_secret_access_key,
            "bucket_name": self.s3_bucket,
            "host": self.s3_host,
            "region": self.s3_region,
            "endpoint_url": self.s3_endpoint_url,
            "use_ssl": self.s3_use_ssl,
            "public_url_scheme": self.s3_public_url_scheme,
            "default_permission": self.s3_default_acl,
            "max_attempts": self.s3_max_attempts,
        }


# Global settings instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get the global application settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
        logger.info(f"Loaded settings for bucket: {_settings.s3_bucket}")
    return _settings


def reload_settings() -> AppSettings:
    """Reload the global application settings."""
    global _settings
    if env_file.exists():
        load_dotenv(env_file, override=True)
    _settings = AppSettings()
    logger.info(f"Reloaded settings for bucket: {_settings.s3_bucket}")
    return _settings
