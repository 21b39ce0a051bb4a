"""ZooKeeper client lifecycle: shared clients, path helpers and shutdown."""

from src.shared.coordination.client import CoordinationClient, fixed_backoff_retry  # noqa: F401
from src.shared.coordination.paths import ConnectionIdentity, join_path, normalize_path  # noqa: F401
from src.shared.coordination.registry import ClientRegistry, kazoo_client_factory  # noqa: F401
from src.shared.coordination.shutdown import ShutdownCoordinator  # noqa: F401

__all__ = [
    # Client handle
    "CoordinationClient",
    "fixed_backoff_retry",
    # Paths
    "ConnectionIdentity",
    "join_path",
    "normalize_path",
    # Registry
    "ClientRegistry",
    "kazoo_client_factory",
    # Shutdown
    "ShutdownCoordinator",
]
