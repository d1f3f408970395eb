"""Shared CLI helpers."""

from pathlib import Path
from typing import Any

import click

from loaddefs.config import LoaddefsConfig, load_config
from loaddefs.core.errors import ConfigError
from loaddefs.core.logging import configure_logging


def load_cli_config(ctx: click.Context, root: Path, **overrides: Any) -> LoaddefsConfig:
    """Load configuration for ``root``; config errors become click errors.

    Unless ``-v`` was given, logging is reconfigured from the loaded
    ``logging`` section.
    """
    try:
        config = load_config(root, **overrides)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if not (ctx.obj or {}).get("verbose"):
        configure_logging(config=config.logging)
    return config
