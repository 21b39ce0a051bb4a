"""Builds configuration units for child nodes of a root path."""
import logging
from typing import Dict, Optional

from src.services.zookeeper_config.services.sources import NodeConfigSource
from src.shared.coordination.paths import join_path
from src.shared.interfaces import ICoordinationClient
from src.shared.utils.config.decoders import DataFormat, NodeDataDecoder

logger = logging.getLogger(__name__)


class NodeSourceFactory:
    """Creates one unloaded NodeConfigSource per child node.

    Args:
        default_format: Data format used when a request names none
    """

    def __init__(self, default_format: DataFormat = DataFormat.PROPERTIES):
        self.default_format = DataFormat(default_format)
        self._decoders: Dict[DataFormat, NodeDataDecoder] = {}

    def decoder_for(self, data_format: Optional[DataFormat] = None) -> NodeDataDecoder:
        data_format = DataFormat(data_format or self.default_format)
        if data_format not in self._decoders:
            self._decoders[data_format] = NodeDataDecoder(data_format)
        return self._decoders[data_format]

    def create(
        self,
        root_path: str,
        child_name: str,
        client: ICoordinationClient,
        auto_refreshed: bool,
        data_format: Optional[DataFormat] = None,
    ) -> NodeConfigSource:
        """Build the unit for ``child_name`` beneath ``root_path``.

        The unit is returned unloaded; call ``load()`` to read or watch it.
        """
        path = join_path(root_path, child_name)
        logger.debug(
            f"Creating config source for {path}",
            extra={"path": path, "auto_refreshed": auto_refreshed},
        )
        return NodeConfigSource(
            path,
            client,
            auto_refreshed=auto_refreshed,
            decoder=self.decoder_for(data_format),
        )
