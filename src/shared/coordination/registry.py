"""Process-wide registry of shared coordination clients."""
import logging
import threading
from typing import Callable, Dict, List, Optional

from src.shared.coordination.client import (
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_START_TIMEOUT_SECONDS,
    CoordinationClient,
)
from src.shared.coordination.paths import ConnectionIdentity
from src.shared.exceptions.coordination import ConnectionError, ShutdownError
from src.shared.interfaces import ClientState, ICoordinationClient

logger = logging.getLogger(__name__)


ClientFactory = Callable[[ConnectionIdentity], ICoordinationClient]


def kazoo_client_factory(
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
    start_timeout: float = DEFAULT_START_TIMEOUT_SECONDS,
) -> ClientFactory:
    """Build a factory producing kazoo-backed clients with a fixed retry delay."""

    def factory(identity: ConnectionIdentity) -> ICoordinationClient:
        return CoordinationClient.for_identity(
            identity,
            retry_delay_seconds=retry_delay_seconds,
            start_timeout=start_timeout,
        )

    return factory


class ClientRegistry:
    """Caches one started client per connection identity.

    Clients are created lazily on first request and shared by every
    loader using the same identity. Construction is serialized per
    identity only, so unrelated identities never wait on each other.

    Example:
        registry = ClientRegistry()
        client = registry.get_or_create(ConnectionIdentity("zk:2181", "/config"))
        ...
        registry.close_all()

    Args:
        client_factory: Builds an unstarted client for an identity
    """

    def __init__(self, client_factory: Optional[ClientFactory] = None):
        self._client_factory = client_factory or kazoo_client_factory()
        self._lock = threading.Lock()
        self._clients: Dict[str, ICoordinationClient] = {}
        self._key_locks: Dict[str, threading.Lock] = {}
        self._shut_down = False

    def get_or_create(self, identity: ConnectionIdentity) -> ICoordinationClient:
        """Return the shared client for ``identity``, creating and starting it on a miss.

        Raises:
            ConnectionError: If the client cannot be built or started, or
                the registry has been shut down. Nothing is cached on failure.
        """
        key = identity.key

        with self._lock:
            self._ensure_open(identity)
            client = self._clients.get(key)
            if client is not None:
                return client
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                self._ensure_open(identity)
                client = self._clients.get(key)
            if client is not None:
                # Built by a concurrent caller while we waited
                return client

            client = self._build(identity)

            with self._lock:
                if self._shut_down:
                    client.close()
                    self._ensure_open(identity)
                self._clients[key] = client

        logger.info(
            f"Coordination client registered for {key}",
            extra={"identity": key, "clients": len(self._clients)},
        )
        return client

    def _build(self, identity: ConnectionIdentity) -> ICoordinationClient:
        try:
            client = self._client_factory(identity)
            client.start()
        except ConnectionError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to create client for {identity.key}: {e}",
                extra={"identity": identity.key},
            )
            raise ConnectionError(
                f"Failed to create coordination client for {identity.key}",
                connect_string=identity.connect_string,
                original=e,
            ) from e
        return client

    def _ensure_open(self, identity: ConnectionIdentity) -> None:
        if self._shut_down:
            error = ConnectionError(
                f"Client registry is shut down, cannot serve {identity.key}",
                connect_string=identity.connect_string,
            )
            # Permanent: a shut-down registry never serves clients again
            error.retryable = False
            raise error

    def close_all(self, raise_on_error: bool = False) -> int:
        """Close every started client and clear the registry.

        Each close is isolated: a failing client is logged and the
        remaining clients are still closed. Safe to call repeatedly.

        Args:
            raise_on_error: Raise ShutdownError after all closes if any failed

        Returns:
            Number of clients closed
        """
        with self._lock:
            self._shut_down = True
            clients = list(self._clients.items())
            self._clients.clear()
            self._key_locks.clear()

        closed = 0
        failed: List[str] = []

        for key, client in clients:
            if client.state is not ClientState.STARTED:
                logger.debug(f"Skipping client {key} in state {client.state.value}")
                continue
            try:
                client.close()
                closed += 1
            except Exception as e:
                failed.append(key)
                logger.error(
                    f"Error closing coordination client {key}: {e}",
                    extra={"identity": key},
                    exc_info=True,
                )

        if clients:
            logger.info(
                "Coordination clients closed",
                extra={"closed": closed, "failed": len(failed), "total": len(clients)},
            )

        if failed and raise_on_error:
            raise ShutdownError(
                f"{len(failed)} coordination client(s) failed to close",
                failed=failed,
            )

        return closed

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def clients(self) -> Dict[str, ICoordinationClient]:
        """Snapshot of registered clients keyed by identity key."""
        with self._lock:
            return dict(self._clients)

    def __contains__(self, identity: object) -> bool:
        if not isinstance(identity, ConnectionIdentity):
            return False
        with self._lock:
            return identity.key in self._clients

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __repr__(self) -> str:
        """String representation."""
        return f"ClientRegistry(clients={len(self)}, shut_down={self._shut_down})"
