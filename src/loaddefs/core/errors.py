"""loaddefs error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Read (Lisp reader)
- 4xxx: Extract
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Read (3xxx)
    READ_UNEXPECTED_EOF = 3001
    READ_UNBALANCED = 3002
    READ_INVALID_SYNTAX = 3003

    # Extract (4xxx)
    EXTRACT_SOURCE_UNREADABLE = 4001
    EXTRACT_EXPANSION_FAILED = 4002


@dataclass(frozen=True, slots=True)
class LoaddefsError(Exception):
    """Base error with structured context for CLI and JSON output."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'READ_UNBALANCED')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(LoaddefsError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class ReadError(LoaddefsError):
    """Lisp reader errors. Fatal for the file being read."""

    @classmethod
    def unexpected_eof(cls, line: int, column: int, source: str | None = None) -> "ReadError":
        return cls(
            code=ErrorCode.READ_UNEXPECTED_EOF,
            message=f"End of input while reading datum at {line}:{column}",
            details={"line": line, "column": column, "source": source},
        )

    @classmethod
    def unbalanced(cls, line: int, column: int, source: str | None = None) -> "ReadError":
        return cls(
            code=ErrorCode.READ_UNBALANCED,
            message=f"Unbalanced closing delimiter at {line}:{column}",
            details={"line": line, "column": column, "source": source},
        )

    @classmethod
    def invalid_syntax(
        cls, line: int, column: int, reason: str, source: str | None = None
    ) -> "ReadError":
        return cls(
            code=ErrorCode.READ_INVALID_SYNTAX,
            message=f"Invalid syntax at {line}:{column}: {reason}",
            details={"line": line, "column": column, "reason": reason, "source": source},
        )

    def with_source(self, source: str) -> "ReadError":
        """Return a copy of this error naming the file it came from."""
        return type(self)(
            code=self.code,
            message=f"{source}: {self.message}",
            retryable=self.retryable,
            details={**self.details, "source": source},
        )


class ExtractError(LoaddefsError):
    """Errors raised while extracting records from a source file."""

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "ExtractError":
        return cls(
            code=ErrorCode.EXTRACT_SOURCE_UNREADABLE,
            message=f"Cannot read source file {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class ExpansionError(LoaddefsError):
    """A derived definition could not be macro-expanded."""

    @classmethod
    def failed(cls, head: str, reason: str) -> "ExpansionError":
        return cls(
            code=ErrorCode.EXTRACT_EXPANSION_FAILED,
            message=f"Expansion of '{head}' failed: {reason}",
            details={"head": head, "reason": reason},
        )
