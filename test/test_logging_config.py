import logging
from typing import Any

import pytest
import structlog

from s3helper.utils.env_config import AppSettings
from s3helper.utils.logging_config import setup_logging


@pytest.fixture
def restore_root_logger() -> Any:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_console(restore_root_logger: logging.Logger, mocker: Any) -> None:
    configure = mocker.patch.object(structlog, "configure")

    setup_logging(AppSettings(log_level="DEBUG", log_json_format=False))

    assert restore_root_logger.level == logging.DEBUG
    assert len(restore_root_logger.handlers) == 1
    assert logging.getLogger("botocore").level == logging.INFO
    processors = configure.call_args.kwargs["processors"]
    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


def test_setup_logging_json(restore_root_logger: logging.Logger, mocker: Any) -> None:
    configure = mocker.patch.object(structlog, "configure")

    setup_logging(AppSettings(log_level="WARNING", log_json_format=True))

    assert restore_root_logger.level == logging.WARNING
    processors = configure.call_args.kwargs["processors"]
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)


def test_unknown_level_falls_back_to_info(restore_root_logger: logging.Logger, mocker: Any) -> None:
    mocker.patch.object(structlog, "configure")

    setup_logging(AppSettings(log_level="chatty"))

    assert restore_root_logger.level == logging.INFO
