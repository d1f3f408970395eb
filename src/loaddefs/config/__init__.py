"""Config module exports."""

from loaddefs.config.loader import load_config
from loaddefs.config.models import (
    ExtractConfig,
    LoaddefsConfig,
    LoggingConfig,
    OutputConfig,
)

__all__ = [
    "load_config",
    "ExtractConfig",
    "LoaddefsConfig",
    "LoggingConfig",
    "OutputConfig",
]
