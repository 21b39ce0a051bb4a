"""Custom exceptions for the configuration loader."""

from src.shared.exceptions.base import ZkConfigError

from src.shared.exceptions.coordination import (
    CoordinationError,
    ConnectionError,
    PathStateError,
    EnumerationError,
    ShutdownError,
)

from src.shared.exceptions.config import (
    ConfigError,
    ConfigParseError,
    ConfigValidationError,
)

__all__ = [
    # Base exception
    "ZkConfigError",
    # Coordination store exceptions
    "CoordinationError",
    "ConnectionError",
    "PathStateError",
    "EnumerationError",
    "ShutdownError",
    # Configuration exceptions
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
]
