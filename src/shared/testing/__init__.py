"""Testing utilities and mocks for the application.

Provides mock implementations for external services to enable fast, isolated testing.
"""
from src.shared.testing.mocks import (
    InMemoryCoordinationClient,
    InMemoryCoordinationStore,
    in_memory_client_factory,
)

__all__ = [
    "InMemoryCoordinationStore",
    "InMemoryCoordinationClient",
    "in_memory_client_factory",
]
