"""
Logging initialization.

Configures the stdlib root logger and structlog from application settings.
"""

import logging
import sys

import structlog

from .env_config import AppSettings

logger = logging.getLogger(__name__)


def setup_logging(settings: AppSettings) -> None:
    """Set up logging based on configuration."""
    level = getattr(logging, settings.log_level, logging.INFO)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    if settings.log_json_format:
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        renderer = structlog.processors.JSONRenderer()
    else:
        console_handler.setFormatter(logging.Formatter(settings.log_format))
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # botocore is chatty at DEBUG
    if level <= logging.DEBUG:
        logging.getLogger("botocore").setLevel(logging.INFO)

    logger.debug(f"Logging configured: level={settings.log_level}, json={settings.log_json_format}")
