"""Core module exports."""

from loaddefs.core.errors import (
    ConfigError,
    ErrorCode,
    ExpansionError,
    ExtractError,
    LoaddefsError,
    ReadError,
)
from loaddefs.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from loaddefs.core.progress import pluralize, progress, status, task

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "ExpansionError",
    "ExtractError",
    "LoaddefsError",
    "ReadError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "pluralize",
    "progress",
    "status",
    "task",
]
