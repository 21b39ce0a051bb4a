"""Abstract interfaces for shared infrastructure.

Allows dependency injection for testability and flexibility.
All concrete implementations must honor these contracts.
"""
from abc import abstractmethod
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Protocol, Tuple


# ==================== Coordination Interfaces ====================

class ClientState(Enum):
    """Lifecycle states of a coordination client handle."""
    CREATED = "created"
    STARTED = "started"
    CLOSED = "closed"


# Called with (data, version); data and version are None when the node is missing.
# Returning False stops further deliveries.
DataWatchCallback = Callable[[Optional[bytes], Optional[int]], Optional[bool]]


class ICoordinationClient(Protocol):
    """Protocol for a coordination store client handle.

    Implementations: CoordinationClient (kazoo), InMemoryCoordinationClient.
    """

    @property
    @abstractmethod
    def state(self) -> ClientState:
        """Current lifecycle state."""
        ...

    @abstractmethod
    def start(self) -> None:
        """Connect to the store. Moves CREATED -> STARTED."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Disconnect and release resources. Moves STARTED -> CLOSED."""
        ...

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether a node exists.

        Args:
            path: Absolute node path

        Returns:
            True if the node exists
        """
        ...

    @abstractmethod
    def create(self, path: str) -> None:
        """Create a node (and missing parents).

        Raises:
            PathStateError: If the node already exists
        """
        ...

    @abstractmethod
    def get_children(self, path: str) -> List[str]:
        """List immediate child names in store order."""
        ...

    @abstractmethod
    def get_data(self, path: str) -> Tuple[bytes, int]:
        """Read node data and its version."""
        ...

    @abstractmethod
    def watch_data(self, path: str, callback: DataWatchCallback) -> None:
        """Deliver the current node data now and on every later change.

        Deliveries after the first happen on the client's own thread.
        """
        ...


# ==================== Configuration Source Interfaces ====================

class IConfigSource(Protocol):
    """Protocol for a named, queryable configuration source."""

    name: str

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Look up a property value."""
        ...

    @abstractmethod
    def __contains__(self, key: object) -> bool:
        ...

    @property
    @abstractmethod
    def property_names(self) -> Iterable[str]:
        """Names of all properties this source defines."""
        ...
