"""ZooKeeper client handle backed by kazoo."""
import logging
import threading
from typing import List, Optional, Tuple

from kazoo.client import KazooClient
from kazoo.exceptions import KazooException, NodeExistsError, NoNodeError
from kazoo.retry import KazooRetry

from src.shared.coordination.paths import ConnectionIdentity
from src.shared.exceptions.coordination import (
    ConnectionError,
    CoordinationError,
    PathStateError,
)
from src.shared.interfaces import ClientState, DataWatchCallback

logger = logging.getLogger(__name__)


DEFAULT_RETRY_DELAY_SECONDS = 0.3
DEFAULT_START_TIMEOUT_SECONDS = 15.0


def fixed_backoff_retry(delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS) -> KazooRetry:
    """Retry forever, waiting the same delay between attempts."""
    return KazooRetry(max_tries=-1, delay=delay_seconds, backoff=1, max_jitter=0)


class CoordinationClient:
    """ZooKeeper client handle with an explicit lifecycle.

    Wraps a KazooClient and translates kazoo failures into
    CoordinationError subclasses. Connection and command retries
    use a fixed backoff and never give up.

    Args:
        connect_string: ZooKeeper ensemble address (e.g., "zk1:2181,zk2:2181")
        retry_delay_seconds: Fixed delay between retries
        start_timeout: Seconds to wait for a session in start()
        kazoo_client: Pre-built KazooClient (mainly for tests)
    """

    def __init__(
        self,
        connect_string: str,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        start_timeout: float = DEFAULT_START_TIMEOUT_SECONDS,
        kazoo_client: Optional[KazooClient] = None,
    ):
        self.connect_string = connect_string
        self.retry_delay_seconds = retry_delay_seconds
        self.start_timeout = start_timeout

        try:
            self._client = kazoo_client or KazooClient(
                hosts=connect_string,
                connection_retry=fixed_backoff_retry(retry_delay_seconds),
                command_retry=fixed_backoff_retry(retry_delay_seconds),
            )
        except (KazooException, ValueError) as e:
            raise ConnectionError(
                f"Invalid ZooKeeper connect string: {connect_string}",
                connect_string=connect_string,
                original=e,
            ) from e

        self._state = ClientState.CREATED
        self._state_lock = threading.Lock()

        logger.debug(
            "CoordinationClient created",
            extra={
                "connect_string": connect_string,
                "retry_delay_seconds": retry_delay_seconds,
                "start_timeout": start_timeout,
            },
        )

    @classmethod
    def for_identity(
        cls,
        identity: ConnectionIdentity,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        start_timeout: float = DEFAULT_START_TIMEOUT_SECONDS,
    ) -> "CoordinationClient":
        """Build a client for a registry identity (connects without chroot)."""
        return cls(
            identity.connect_string,
            retry_delay_seconds=retry_delay_seconds,
            start_timeout=start_timeout,
        )

    @property
    def state(self) -> ClientState:
        """Current lifecycle state."""
        return self._state

    def start(self) -> None:
        """Establish the ZooKeeper session.

        Raises:
            ConnectionError: If the session is not established in time
        """
        with self._state_lock:
            if self._state is not ClientState.CREATED:
                logger.debug(
                    f"Client already {self._state.value}, not starting",
                    extra={"connect_string": self.connect_string},
                )
                return

            logger.info(f"Connecting to ZooKeeper at {self.connect_string}...")

            try:
                self._client.start(timeout=self.start_timeout)
            except Exception as e:
                # kazoo stops and closes itself on a start timeout
                logger.error(f"Failed to connect to ZooKeeper: {e}")
                raise ConnectionError(
                    f"Failed to connect to ZooKeeper at {self.connect_string}",
                    connect_string=self.connect_string,
                    original=e,
                ) from e

            self._state = ClientState.STARTED

        logger.info(f"Connected to ZooKeeper at {self.connect_string}")

    def close(self) -> None:
        """Stop the session and release the client.

        Only a STARTED client is closed; other states are left alone.
        """
        with self._state_lock:
            if self._state is not ClientState.STARTED:
                logger.debug(
                    f"Client is {self._state.value}, nothing to close",
                    extra={"connect_string": self.connect_string},
                )
                return

            logger.info(f"Closing ZooKeeper client for {self.connect_string}...")
            try:
                self._client.stop()
                self._client.close()
            finally:
                self._state = ClientState.CLOSED

        logger.info(f"ZooKeeper client for {self.connect_string} closed")

    def exists(self, path: str) -> bool:
        try:
            return self._client.exists(path) is not None
        except KazooException as e:
            raise CoordinationError(f"Failed to check existence of {path}", path=path, original=e) from e

    def create(self, path: str) -> None:
        """Create a node, creating missing parents.

        Raises:
            PathStateError: If the node already exists
            CoordinationError: On any other failure
        """
        try:
            self._client.create(path, b"", makepath=True)
        except NodeExistsError as e:
            raise PathStateError(f"Node already exists: {path}", path=path, original=e) from e
        except KazooException as e:
            raise CoordinationError(f"Failed to create {path}", path=path, original=e) from e
        logger.info(f"Created node {path}", extra={"path": path})

    def get_children(self, path: str) -> List[str]:
        try:
            return list(self._client.get_children(path))
        except NoNodeError as e:
            raise CoordinationError(f"Node does not exist: {path}", path=path, original=e) from e
        except KazooException as e:
            raise CoordinationError(f"Failed to list children of {path}", path=path, original=e) from e

    def get_data(self, path: str) -> Tuple[bytes, int]:
        try:
            data, stat = self._client.get(path)
        except NoNodeError as e:
            raise CoordinationError(f"Node does not exist: {path}", path=path, original=e) from e
        except KazooException as e:
            raise CoordinationError(f"Failed to read {path}", path=path, original=e) from e
        return data or b"", stat.version

    def watch_data(self, path: str, callback: DataWatchCallback) -> None:
        """Register a kazoo DataWatch that forwards (data, version) to callback."""

        def _listener(data, stat, event=None):
            version = stat.version if stat is not None else None
            return callback(data, version)

        try:
            self._client.DataWatch(path, _listener)
        except KazooException as e:
            raise CoordinationError(f"Failed to watch {path}", path=path, original=e) from e

        logger.debug(f"Data watch registered on {path}", extra={"path": path})

    def __repr__(self) -> str:
        """String representation."""
        return f"CoordinationClient(connect_string={self.connect_string!r}, state={self._state.value})"
