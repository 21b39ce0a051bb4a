"""Ordered composite of configuration sources."""
import logging
from typing import Any, List, Optional, Tuple

from src.services.zookeeper_config.services.sources import MISSING, ConfigSource

logger = logging.getLogger(__name__)


class CompositeConfigSource(ConfigSource):
    """Named source that consults its member sources in order.

    The first member defining a key wins; later members are shadowed
    for that key. Members are never merged or deduplicated.

    Example:
        composite = CompositeConfigSource("zookeeper")
        composite.add_source(app_source)   # consulted first
        composite.add_source(db_source)
        composite.get("server.port")
    """

    def __init__(self, name: str):
        super().__init__(name)
        self._sources: List[ConfigSource] = []

    def add_source(self, source: ConfigSource) -> None:
        """Append a source with the lowest precedence so far."""
        self._sources.append(source)

    def add_first_source(self, source: ConfigSource) -> None:
        """Insert a source with the highest precedence."""
        self._sources.insert(0, source)

    @property
    def sources(self) -> Tuple[ConfigSource, ...]:
        return tuple(self._sources)

    @property
    def source_names(self) -> List[str]:
        return [source.name for source in self._sources]

    def _lookup(self, key: str) -> Any:
        for source in self._sources:
            value = source._lookup(key)
            if value is not MISSING:
                return value
        return MISSING

    def find_source(self, key: str) -> Optional[ConfigSource]:
        """Return the member source that supplies ``key``, or None."""
        for source in self._sources:
            if source._lookup(key) is not MISSING:
                return source
        return None

    @property
    def property_names(self) -> List[str]:
        names = {}
        for source in self._sources:
            for name in source.property_names:
                names.setdefault(name, None)
        return list(names)

    def close(self) -> None:
        """Close every member that supports closing."""
        for source in self._sources:
            close = getattr(source, "close", None)
            if close is not None:
                close()
        logger.debug(
            f"Composite config source closed: {self.name}",
            extra={"source_name": self.name, "sources": len(self._sources)},
        )

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self):
        return iter(tuple(self._sources))

    def __repr__(self) -> str:
        """String representation."""
        return f"CompositeConfigSource(name={self.name!r}, sources={self.source_names})"
