"""Decoders turning raw node data into flat property mappings."""
import json
import logging
import re
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

import yaml

from src.shared.exceptions.config import ConfigParseError


logger = logging.getLogger(__name__)


class DataFormat(str, Enum):
    """Format of the document stored in a configuration node."""
    PROPERTIES = "properties"
    YAML = "yaml"
    JSON = "json"


def flatten(data: Any, prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings and lists into dotted/indexed keys.

    Example:
        flatten({"server": {"port": 8080, "hosts": ["a", "b"]}})
        # {"server.port": 8080, "server.hosts[0]": "a", "server.hosts[1]": "b"}
    """
    result: Dict[str, Any] = {}

    if isinstance(data, dict):
        if not data and prefix:
            result[prefix] = {}
        for key, value in data.items():
            child = f"{prefix}.{key}" if prefix else str(key)
            result.update(flatten(value, child))
    elif isinstance(data, list):
        if not data and prefix:
            result[prefix] = []
        for index, value in enumerate(data):
            result.update(flatten(value, f"{prefix}[{index}]"))
    else:
        result[prefix] = data

    return result


def _logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield (line_number, line) pairs, joining backslash continuations."""
    buffer: List[str] = []
    start = 0

    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.lstrip() if buffer else raw.strip()
        if not buffer:
            start = number
            if not line or line[0] in "#!":
                continue

        # An odd number of trailing backslashes continues the line
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            buffer.append(line[:-1])
            continue

        buffer.append(line)
        yield start, "".join(buffer)
        buffer = []

    if buffer:
        yield start, "".join(buffer)


_ESCAPE_PATTERN = re.compile(r"\\(.)")
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _split_property(line: str) -> Tuple[str, str]:
    escaped = False
    for index, char in enumerate(line):
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        if char in "=:":
            return line[:index], line[index + 1:].lstrip()
        if char.isspace():
            rest = line[index:].lstrip()
            if rest[:1] in ("=", ":"):
                rest = rest[1:].lstrip()
            return line[:index], rest
    return line, ""


def _unescape(value: str) -> str:
    return _ESCAPE_PATTERN.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), value)


def parse_properties(text: str) -> Dict[str, str]:
    """Parse Java-style properties text.

    Supports ``key=value``, ``key: value`` and ``key value`` entries,
    ``#``/``!`` comments and backslash line continuations. Later
    duplicates override earlier ones.
    """
    properties: Dict[str, str] = {}
    for _, line in _logical_lines(text):
        key, value = _split_property(line)
        properties[_unescape(key)] = _unescape(value)
    return properties


class NodeDataDecoder:
    """Decodes node bytes of one data format into a flat dictionary."""

    def __init__(self, data_format: DataFormat = DataFormat.PROPERTIES):
        self.data_format = DataFormat(data_format)

    def decode(self, data: Optional[bytes], source: Optional[str] = None) -> Dict[str, Any]:
        """Decode node data.

        Args:
            data: Raw node bytes (None or empty means no properties)
            source: Node path, used in errors and logs

        Returns:
            Flat property dictionary

        Raises:
            ConfigParseError: If the data is not valid for the format
        """
        if not data:
            return {}

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ConfigParseError(
                message=f"Node data is not valid UTF-8: {e}",
                source=source,
                data_format=self.data_format.value,
                original_error=e,
            )

        if self.data_format is DataFormat.PROPERTIES:
            return parse_properties(text)

        document = self._load_document(text, source)

        if document is None:
            return {}

        if not isinstance(document, dict):
            logger.error(
                f"Node data must contain a mapping: {source}",
                extra={"path": source, "type": type(document).__name__},
            )
            raise ConfigParseError(
                message=f"{self.data_format.value} document must contain a mapping, got {type(document).__name__}",
                source=source,
                data_format=self.data_format.value,
            )

        return flatten(document)

    def _load_document(self, text: str, source: Optional[str]) -> Any:
        if self.data_format is DataFormat.JSON:
            try:
                return json.loads(text)
            except json.JSONDecodeError as e:
                raise ConfigParseError(
                    message=f"Failed to parse JSON node data: {e}",
                    source=source,
                    data_format=self.data_format.value,
                    line_number=e.lineno,
                    original_error=e,
                )

        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            raise ConfigParseError(
                message=f"Failed to parse YAML node data: {e}",
                source=source,
                data_format=self.data_format.value,
                line_number=mark.line + 1 if mark is not None else None,
                original_error=e,
            )


def decode_node_data(
    data: Optional[bytes],
    data_format: DataFormat = DataFormat.PROPERTIES,
    source: Optional[str] = None,
) -> Dict[str, Any]:
    """Convenience function for decoding node data."""
    return NodeDataDecoder(data_format).decode(data, source)
