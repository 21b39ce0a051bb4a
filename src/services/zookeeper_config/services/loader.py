"""Loads ZooKeeper configuration into composite configuration sources."""
import logging
from typing import List, Optional

from src.services.zookeeper_config.config import ZookeeperConfigSettings
from src.services.zookeeper_config.services.composite import CompositeConfigSource
from src.services.zookeeper_config.services.factory import NodeSourceFactory
from src.services.zookeeper_config.services.resolver import PathResolver
from src.services.zookeeper_config.services.sources import NodeConfigSource
from src.shared.coordination.registry import ClientRegistry

logger = logging.getLogger(__name__)


class ZookeeperConfigLoader:
    """Builds a composite configuration source from a ZooKeeper root path.

    Pipeline:
    1. Get (or create) the shared client for the connection identity
    2. Check the root path, creating it when auto refresh is on
    3. List the root's children in store order
    4. Build and load one unit per child
    5. Return the units as one composite (first child wins on lookups)

    A load either returns a complete composite or raises; units built
    before a failure are closed.

    Example:
        settings = ZookeeperConfigSettings(connect_string="zk:2181", root_path="/config")
        registry = ClientRegistry(settings.client_factory())
        ShutdownCoordinator(registry).install()
        loader = ZookeeperConfigLoader(registry)

        composite = loader.load("zookeeper", settings)
        if composite is not None:
            port = composite.get("server.port")

    Args:
        registry: Shared client registry
        resolver: Root path resolver
        source_factory: Unit factory
    """

    def __init__(
        self,
        registry: ClientRegistry,
        resolver: Optional[PathResolver] = None,
        source_factory: Optional[NodeSourceFactory] = None,
    ):
        self.registry = registry
        self.resolver = resolver
        self.source_factory = source_factory or NodeSourceFactory()

    def load(
        self,
        name: str,
        settings: ZookeeperConfigSettings,
    ) -> Optional[CompositeConfigSource]:
        """Load the configuration under ``settings.root_path``.

        Args:
            name: Name of the resulting composite source
            settings: Location and behavior settings

        Returns:
            Composite source (possibly empty), or None when the root path
            does not exist and auto refresh is off

        Raises:
            ConnectionError: If the client cannot be obtained
            EnumerationError: If the children cannot be listed
            CoordinationError: If a node cannot be checked, created or read
            ConfigParseError: If a unit's initial data cannot be decoded
        """
        identity = settings.identity
        client = self.registry.get_or_create(identity)
        self._warn_on_client_mismatch(client, settings)

        resolver = self.resolver or PathResolver(max_attempts=settings.root_create_attempts)
        resolution = resolver.resolve(client, settings.root_path, settings.auto_refreshed)

        if resolution.is_absent:
            return None

        composite = CompositeConfigSource(name)
        built: List[NodeConfigSource] = []

        try:
            for child in resolution.children:
                source = self.source_factory.create(
                    settings.root_path,
                    child,
                    client,
                    settings.auto_refreshed,
                    data_format=settings.data_format,
                )
                built.append(source)
                source.load()
                composite.add_source(source)
        except Exception as e:
            logger.error(
                f"Failed to load configuration under {settings.root_path}: {e}",
                extra={"identity": identity.key, "source_name": name, "built": len(built)},
            )
            for source in built:
                source.close()
            raise

        logger.info(
            f"Config loaded: {name}",
            extra={
                "source_name": name,
                "identity": identity.key,
                "root_state": resolution.state.value,
                "sources": composite.source_names,
                "auto_refreshed": settings.auto_refreshed,
            },
        )
        return composite

    @staticmethod
    def _warn_on_client_mismatch(client, settings: ZookeeperConfigSettings) -> None:
        """Warn when the shared client was built with other retry or timeout values.

        Those values are fixed by the registry's client factory, not by the
        settings of each load.
        """
        retry_delay = getattr(client, "retry_delay_seconds", None)
        start_timeout = getattr(client, "start_timeout", None)
        if retry_delay is None or start_timeout is None:
            return
        if retry_delay != settings.retry_delay_seconds or start_timeout != settings.start_timeout_seconds:
            logger.warning(
                f"Client for {settings.identity.key} uses retry delay {retry_delay}s and start "
                f"timeout {start_timeout}s, ignoring settings; build the registry with "
                f"settings.client_factory() to apply them",
                extra={
                    "identity": settings.identity.key,
                    "client_retry_delay_seconds": retry_delay,
                    "client_start_timeout": start_timeout,
                    "retry_delay_seconds": settings.retry_delay_seconds,
                    "start_timeout_seconds": settings.start_timeout_seconds,
                },
            )

    def reload(
        self,
        name: str,
        settings: ZookeeperConfigSettings,
        previous: Optional[CompositeConfigSource] = None,
    ) -> Optional[CompositeConfigSource]:
        """Rebuild the composite from scratch and retire the previous one.

        The previous composite is closed only after the new one loaded,
        so a failed reload leaves it in service.
        """
        composite = self.load(name, settings)
        if previous is not None and previous is not composite:
            previous.close()
        return composite
