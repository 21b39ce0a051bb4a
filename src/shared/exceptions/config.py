"""Configuration errors: undecodable node data and invalid loader settings."""
from typing import Any, Dict, Optional

from src.shared.exceptions.base import ZkConfigError


class ConfigError(ZkConfigError):
    """Base exception for configuration errors.

    Args:
        message: Human-readable error message
        source: Node path or settings class the error relates to
        error_code: Machine-readable error code
        details: Additional error context
        original: Underlying exception
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        error_code: str = "CONFIG_ERROR",
        details: Optional[Dict[str, Any]] = None,
        original: Optional[Exception] = None,
    ):
        details = dict(details or {})
        if source is not None:
            details["source"] = source
        super().__init__(message, error_code=error_code, details=details, original=original)
        self.source = source

    def __str__(self) -> str:
        text = super().__str__()
        if self.source:
            text += f" | Source: {self.source}"
        return text


class ConfigParseError(ConfigError):
    """Node data could not be decoded in its data format.

    Attributes:
        data_format: Format the data was decoded as (properties, yaml, json)
        line_number: 1-based line of the syntax error, when known
    """

    def __init__(
        self,
        message: str = "Failed to parse configuration data",
        source: Optional[str] = None,
        data_format: Optional[str] = None,
        line_number: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {}
        if data_format is not None:
            details["data_format"] = data_format
        if line_number is not None:
            details["line"] = line_number
        super().__init__(
            message,
            source=source,
            error_code="CONFIG_PARSE_FAILED",
            details=details,
            original=original_error,
        )
        self.data_format = data_format
        self.line_number = line_number
        self.original_error = original_error


class ConfigValidationError(ConfigError):
    """Loader settings failed validation.

    Attributes:
        field_errors: Field name -> validation message
    """

    def __init__(
        self,
        message: str = "Configuration validation failed",
        source: Optional[str] = None,
        field_errors: Optional[Dict[str, str]] = None,
        original_error: Optional[Exception] = None,
    ):
        self.field_errors = field_errors or {}
        super().__init__(
            message,
            source=source,
            error_code="CONFIG_INVALID",
            details={"field_errors": self.field_errors},
            original=original_error,
        )
        self.original_error = original_error
