"""ZooKeeper-backed configuration sources.

Discovers the child nodes of a root path and exposes them as one ordered,
composite configuration source, optionally kept live through data watches.

Example Usage:
    from src.shared.coordination import ClientRegistry, ShutdownCoordinator
    from src.services.zookeeper_config import ZookeeperConfigLoader, load_settings

    registry = ClientRegistry()
    ShutdownCoordinator(registry).install()

    loader = ZookeeperConfigLoader(registry)
    settings = load_settings(connect_string="zk:2181", root_path="/config", auto_refreshed=True)

    composite = loader.load("zookeeper", settings)
    composite.get("server.port")

Modules:
    config: Loader settings (pydantic-settings)
    services: Units, composite, path resolver, unit factory and loader
"""
from src.services.zookeeper_config.config import ZookeeperConfigSettings, load_settings
from src.services.zookeeper_config.services import (
    ConfigSource,
    NodeConfigSource,
    CompositeConfigSource,
    PathResolver,
    RootPathState,
    RootResolution,
    NodeSourceFactory,
    ZookeeperConfigLoader,
)

__all__ = [
    # Configuration
    "ZookeeperConfigSettings",
    "load_settings",
    # Sources
    "ConfigSource",
    "NodeConfigSource",
    "CompositeConfigSource",
    # Loading
    "PathResolver",
    "RootPathState",
    "RootResolution",
    "NodeSourceFactory",
    "ZookeeperConfigLoader",
]
