"""Structured JSON logging utility."""

from src.shared.utils.logging.factory import (  # noqa: F401
    configure_logging,
    disable_logging,
    get_logger,
)
from src.shared.utils.logging.formatters import (  # noqa: F401
    StructuredJSONFormatter,
    mask_credentials,
)

__all__ = [
    # Factory
    "configure_logging",
    "get_logger",
    "disable_logging",
    # Formatters
    "StructuredJSONFormatter",
    "mask_credentials",
]
