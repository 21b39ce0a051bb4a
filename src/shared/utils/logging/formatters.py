"""Structured JSON log formatters."""
import json
import logging
import re
import traceback
from datetime import datetime, timezone
from typing import Any, Dict


# Attributes every LogRecord has; anything else came from `extra=`
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}

# Key fragments whose values are always redacted
_SENSITIVE_KEYS = ("password", "passwd", "secret", "token", "auth", "credential")

# user:password@ embedded in connect strings (digest auth, URLs)
_CREDENTIALS_PATTERN = re.compile(r"(?P<user>[^\s:/@,]+):(?P<password>[^\s@/,]+)@")


def _serialize_value(value: Any) -> Any:
    """Safely serialize value to JSON-compatible type."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_serialize_value(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _serialize_value(v) for k, v in value.items()}
    if hasattr(value, "isoformat"):
        return value.isoformat()
    try:
        return str(value)
    except Exception:
        return f"<unserializable: {type(value).__name__}>"


def mask_credentials(text: str) -> str:
    """Mask passwords in ``user:password@host`` fragments."""
    return _CREDENTIALS_PATTERN.sub(r"\g<user>:[REDACTED]@", text)


def _redact_sensitive(data: Any) -> Any:
    """Redact secret-looking keys and embedded credentials.

    Args:
        data: Data to redact (dict, list, or primitive)

    Returns:
        Redacted copy of data
    """
    if isinstance(data, dict):
        redacted = {}
        for key, value in data.items():
            if any(fragment in str(key).lower() for fragment in _SENSITIVE_KEYS):
                redacted[key] = "[REDACTED]"
            else:
                redacted[key] = _redact_sensitive(value)
        return redacted
    if isinstance(data, list):
        return [_redact_sensitive(item) for item in data]
    if isinstance(data, str):
        return mask_credentials(data)
    return data


class StructuredJSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Formats log records as JSON with consistent fields:
    - timestamp (ISO 8601 UTC)
    - level
    - service_name
    - logger_name
    - message
    - source_file / source_line / source_function
    - exception and stack_trace (if applicable)
    - every field passed through ``extra=``
    """

    def __init__(self, service_name: str = "unknown"):
        """Initialize formatter.

        Args:
            service_name: Service name stamped on every entry
        """
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service_name": self.service_name,
            "logger_name": record.name,
            "message": mask_credentials(record.getMessage()),
            "source_file": record.pathname,
            "source_line": record.lineno,
            "source_function": record.funcName,
        }

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            log_entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "module": exc_type.__module__ if exc_type else None,
            }
            if exc_tb:
                log_entry["stack_trace"] = traceback.format_exception(exc_type, exc_value, exc_tb)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        for key, value in _redact_sensitive(extra).items():
            log_entry.setdefault(key, value)

        try:
            return json.dumps(
                {key: _serialize_value(value) for key, value in log_entry.items()},
                default=str,
            )
        except Exception as e:
            return json.dumps({
                "error": "Failed to serialize log entry",
                "original_message": record.getMessage(),
                "serialization_error": str(e),
            })
