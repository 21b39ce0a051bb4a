"""Znode path utilities and connection identity."""
from dataclasses import dataclass


PATH_SEPARATOR = "/"


def normalize_path(path: str) -> str:
    """Normalize a znode path.

    Collapses repeated separators, drops a trailing separator and
    guarantees a leading one.

    Example:
        normalize_path("config//app/") -> "/config/app"
        normalize_path("") -> "/"
    """
    segments = [segment for segment in path.split(PATH_SEPARATOR) if segment]
    return PATH_SEPARATOR + PATH_SEPARATOR.join(segments)


def join_path(base: str, segment: str) -> str:
    """Append ``segment`` as a new path segment beneath ``base``.

    Args:
        base: Parent znode path (e.g., "/config")
        segment: Child name or relative path (e.g., "app")

    Returns:
        Normalized child path (e.g., "/config/app")
    """
    return normalize_path(f"{base}{PATH_SEPARATOR}{segment}")


@dataclass(frozen=True)
class ConnectionIdentity:
    """Identifies one shared client: a connect string and the root path it serves.

    Attributes:
        connect_string: ZooKeeper ensemble address (e.g., "zk1:2181,zk2:2181")
        root_path: Root node the loader traverses
    """

    connect_string: str
    root_path: str

    @property
    def key(self) -> str:
        """Registry key, e.g. "host:2181/config"."""
        return f"{self.connect_string}{self.root_path}"

    def __str__(self) -> str:
        return self.key
