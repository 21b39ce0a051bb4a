"""Configuration sources backed by single ZooKeeper nodes."""
import logging
import threading
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from src.shared.interfaces import ICoordinationClient
from src.shared.utils.config.decoders import NodeDataDecoder

logger = logging.getLogger(__name__)


MISSING = object()


class ConfigSource(ABC):
    """Named, read-only source of configuration properties."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def _lookup(self, key: str) -> Any:
        """Return the value for key or the MISSING sentinel."""

    @property
    @abstractmethod
    def property_names(self) -> List[str]:
        ...

    def get(self, key: str, default: Any = None) -> Any:
        """Get a property value.

        Args:
            key: Property name (e.g., "server.port")
            default: Returned when the property is not defined

        Returns:
            Property value or default
        """
        value = self._lookup(key)
        return default if value is MISSING else value

    def __getitem__(self, key: str) -> Any:
        value = self._lookup(key)
        if value is MISSING:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._lookup(key) is not MISSING

    def as_dict(self) -> Dict[str, Any]:
        """Effective properties as a plain dictionary."""
        return {key: self[key] for key in self.property_names}


class NodeConfigSource(ConfigSource):
    """Configuration unit bound to one node path.

    The node's data is decoded into a flat property mapping that is held
    behind a single reference and replaced wholesale on every update, so a
    reader always sees one complete value set.

    With auto refresh, ``load()`` registers a data watch and later changes
    arrive on the client's thread. A change that fails to decode after the
    initial load is logged and the previous values are kept.

    The client is shared; this source never closes it.

    Args:
        path: Node path (also the source name)
        client: Shared coordination client
        auto_refreshed: Track live changes instead of reading once
        decoder: Decoder for the node data format
    """

    def __init__(
        self,
        path: str,
        client: ICoordinationClient,
        auto_refreshed: bool = False,
        decoder: Optional[NodeDataDecoder] = None,
    ):
        super().__init__(path)
        self.path = path
        self.client = client
        self.auto_refreshed = auto_refreshed
        self.decoder = decoder or NodeDataDecoder()

        self._values: Mapping[str, Any] = MappingProxyType({})
        self._update_lock = threading.Lock()
        self._loaded = False
        self._closed = False
        self._watching = False

        self.version: Optional[int] = None
        self.refresh_count = 0
        self.refresh_failures = 0
        self.last_error: Optional[Exception] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> "NodeConfigSource":
        """Read the node, or start watching it when auto refresh is on.

        Raises:
            CoordinationError: If the node cannot be read
            ConfigParseError: If the initial data cannot be decoded
        """
        if self._loaded:
            return self

        if self.auto_refreshed:
            self.client.watch_data(self.path, self._on_data_change)
            self._watching = True
            if self.last_error is not None and not self._loaded:
                # First delivery failed: the unit never had valid values
                error = self.last_error
                self.close()
                raise error
        else:
            data, version = self.client.get_data(self.path)
            self._swap(self.decoder.decode(data, source=self.path), version)

        self._loaded = True

        logger.debug(
            f"Config source loaded: {self.path}",
            extra={
                "path": self.path,
                "auto_refreshed": self.auto_refreshed,
                "properties": len(self._values),
                "version": self.version,
            },
        )
        return self

    def close(self) -> None:
        """Stop receiving updates. Current values stay readable."""
        if self._closed:
            return
        self._closed = True
        self._watching = False
        logger.debug(f"Config source closed: {self.path}", extra={"path": self.path})

    @property
    def watching(self) -> bool:
        return self._watching and not self._closed

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def _on_data_change(self, data: Optional[bytes], version: Optional[int]) -> Optional[bool]:
        """Watch callback; returning False stops further deliveries."""
        if self._closed:
            return False

        try:
            values = self.decoder.decode(data, source=self.path)
        except Exception as e:
            with self._update_lock:
                self.refresh_failures += 1
                self.last_error = e
            logger.error(
                f"Failed to refresh config source {self.path}, keeping last values: {e}",
                extra={
                    "path": self.path,
                    "version": version,
                    "refresh_failures": self.refresh_failures,
                },
            )
            return None

        if data is None:
            logger.warning(
                f"Config node {self.path} no longer exists, clearing its properties",
                extra={"path": self.path},
            )

        self._swap(values, version, clear_error=True)
        self._loaded = True
        return None

    def _swap(self, values: Dict[str, Any], version: Optional[int], clear_error: bool = False) -> None:
        with self._update_lock:
            self._values = MappingProxyType(dict(values))
            self.version = version
            self.refresh_count += 1
            if clear_error:
                self.last_error = None

        logger.debug(
            f"Config source updated: {self.path}",
            extra={"path": self.path, "version": version, "properties": len(values)},
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def values(self) -> Mapping[str, Any]:
        """Current read-only property snapshot."""
        return self._values

    def _lookup(self, key: str) -> Any:
        return self._values.get(key, MISSING)

    @property
    def property_names(self) -> List[str]:
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"NodeConfigSource(path={self.path!r}, auto_refreshed={self.auto_refreshed}, "
            f"properties={len(self._values)}, version={self.version})"
        )
