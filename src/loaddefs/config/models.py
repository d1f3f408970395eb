"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (LOADDEFS__SECTION__KEY)
3. Directory YAML (<dir>/.loaddefs.yaml)
4. Global YAML (~/.config/loaddefs/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    LOADDEFS__<SECTION>__<KEY>=<VALUE>

Examples:
    LOADDEFS__LOGGING__LEVEL=DEBUG
    LOADDEFS__EXTRACT__COMPUTE_PREFIXES=false
    LOADDEFS__OUTPUT__MAIN_FILE=my-loaddefs.el
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from loaddefs.config.constants import (
    DEFAULT_IGNORED_DEFINITIONS,
    DEFAULT_PREFIX_DESTINATION_OVERRIDES,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        LOADDEFS__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every parsed file and expansion failure.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ExtractConfig(BaseModel):
    """Extraction configuration.

    Env vars:
        LOADDEFS__EXTRACT__COMPUTE_PREFIXES: Emit definition prefix records
        LOADDEFS__EXTRACT__INCLUDE_PACKAGE_VERSION: Emit package version records
    """

    compute_prefixes: bool = Field(
        default=True,
        description="Compute a covering prefix set per file. A file can still opt out "
        "with the autoload-compute-prefixes local variable.",
    )
    ignored_definitions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_DEFINITIONS),
        description="Definition heads whose names never count towards prefixes.",
    )
    version_only_files: list[str] = Field(
        default_factory=list,
        description="Files scanned for their package version only. "
        "Matched against the file name or its path relative to the scanned directory.",
    )
    include_package_version: bool = Field(
        default=True,
        description="Record ';; Version:' headers as package version records.",
    )
    source_suffixes: list[str] = Field(
        default_factory=lambda: [".el"],
        description="File suffixes considered source files during discovery.",
    )
    excluded_files: list[str] = Field(
        default_factory=list,
        description="File names never scanned, in addition to generated manifests.",
    )
    prefix_destination_overrides: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_PREFIX_DESTINATION_OVERRIDES),
        description="Path substring -> destination (relative to the main output "
        "directory) for prefix records of files in legacy subtrees.",
    )

    @field_validator("source_suffixes")
    @classmethod
    def validate_suffixes(cls, v: list[str]) -> list[str]:
        for suffix in v:
            if not suffix.startswith("."):
                raise ValueError(f"Suffix must start with '.': {suffix}")
        return v


class OutputConfig(BaseModel):
    """Manifest output configuration.

    Env vars:
        LOADDEFS__OUTPUT__MAIN_FILE: Default destination file name
        LOADDEFS__OUTPUT__TIMESTAMPS: Record source mtimes in section headers
    """

    main_file: str = Field(
        default="loaddefs.el",
        description="Default destination, relative to the first scanned directory.",
    )
    timestamps: bool = Field(
        default=False,
        description="Write source modification times into section headers. "
        "TRADEOFF: Disabled output is byte-identical across runs on unchanged input.",
    )
    escape_newlines: bool = Field(
        default=True,
        description="Print newlines inside strings as \\n so every record is one line.",
    )


class LoaddefsConfig(BaseModel):
    """Root configuration for loaddefs.

    All settings can be configured via:
    1. Environment variables: LOADDEFS__SECTION__KEY
    2. YAML config files (directory or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    extract: ExtractConfig = Field(default_factory=ExtractConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
