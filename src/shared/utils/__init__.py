"""Shared utilities module."""

from src.shared.utils import config  # noqa: F401
from src.shared.utils import logging  # noqa: F401

__all__ = [
    "config",
    "logging",
]
