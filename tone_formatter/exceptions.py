"""Custom exceptions shared across services."""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Tag set at the point of failure and carried to clients."""

    VALIDATION = "validation"
    LENGTH = "length"
    CONFIGURATION = "configuration"
    UPSTREAM = "upstream"
    TIMEOUT = "timeout"
    NETWORK = "network"
    RATE_LIMIT = "rate_limit"
    UNKNOWN = "unknown"


@dataclass(eq=False)
class ToneFormatterError(Exception):
    """Base exception for service layer failures."""

    message: str
    category: ErrorCategory = ErrorCategory.UNKNOWN
    status_code: int | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


@dataclass(eq=False)
class ValidationError(ToneFormatterError):
    """Raised when a format request fails input validation."""

    category: ErrorCategory = ErrorCategory.VALIDATION


@dataclass(eq=False)
class ConfigError(ToneFormatterError):
    """Raised when the upstream credential or configuration is missing."""

    category: ErrorCategory = ErrorCategory.CONFIGURATION


@dataclass(eq=False)
class UpstreamError(ToneFormatterError):
    """Raised when the rewrite provider fails to return usable text."""

    category: ErrorCategory = ErrorCategory.UPSTREAM


@dataclass(eq=False)
class ClientError(ToneFormatterError):
    """Raised on the client side when a request cannot be made or fails."""
