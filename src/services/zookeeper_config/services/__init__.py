"""Service implementations for the ZooKeeper configuration loader."""
from src.services.zookeeper_config.services.sources import ConfigSource, NodeConfigSource
from src.services.zookeeper_config.services.composite import CompositeConfigSource
from src.services.zookeeper_config.services.resolver import (
    PathResolver,
    RootPathState,
    RootResolution,
)
from src.services.zookeeper_config.services.factory import NodeSourceFactory
from src.services.zookeeper_config.services.loader import ZookeeperConfigLoader

__all__ = [
    "ConfigSource",
    "NodeConfigSource",
    "CompositeConfigSource",
    "PathResolver",
    "RootPathState",
    "RootResolution",
    "NodeSourceFactory",
    "ZookeeperConfigLoader",
]
