"""Configuration data decoding utilities."""

from src.shared.utils.config.decoders import (  # noqa: F401
    DataFormat,
    NodeDataDecoder,
    decode_node_data,
    flatten,
    parse_properties,
)

__all__ = [
    "DataFormat",
    "NodeDataDecoder",
    "decode_node_data",
    "flatten",
    "parse_properties",
]
