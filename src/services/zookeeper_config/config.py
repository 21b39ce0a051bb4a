"""Settings for the ZooKeeper configuration loader.

Values come from keyword arguments, environment variables prefixed with
``ZOOKEEPER_CONFIG_`` or a ``.env`` file, in that order of precedence.
"""
import logging
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.shared.coordination.paths import ConnectionIdentity, normalize_path
from src.shared.coordination.registry import ClientFactory, kazoo_client_factory
from src.shared.exceptions.config import ConfigValidationError
from src.shared.utils.config.decoders import DataFormat

logger = logging.getLogger(__name__)


class ZookeeperConfigSettings(BaseSettings):
    """Where configuration lives in ZooKeeper and how to load it.

    Attributes:
        connect_string: ZooKeeper ensemble address
        root_path: Node whose children are the configuration units
        auto_refreshed: Watch units for changes and create a missing root
        data_format: Format of the document stored in each unit node
        retry_delay_ms: Fixed delay between client retries (retries never stop)
        start_timeout_seconds: Time allowed to establish a session
        root_create_attempts: Existence re-checks when root creation races

    ``retry_delay_ms`` and ``start_timeout_seconds`` shape the shared client
    and only apply when the registry is built with ``client_factory()``.
    A bare ``ClientRegistry()`` uses the client defaults, and the loader
    logs a warning when a load's settings differ from its client's.
    """

    model_config = SettingsConfigDict(
        env_prefix="ZOOKEEPER_CONFIG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Location
    connect_string: str = Field(
        default="127.0.0.1:2181",
        description="ZooKeeper connect string (host:port[,host:port...])"
    )
    root_path: str = Field(
        default="/configs",
        description="Root node holding one child node per configuration unit"
    )

    # Behavior
    auto_refreshed: bool = Field(
        default=False,
        description="Track live changes and create the root path if missing"
    )
    data_format: DataFormat = Field(
        default=DataFormat.PROPERTIES,
        description="Format of unit node data (properties, yaml, json)"
    )

    # Client settings
    retry_delay_ms: int = Field(
        default=300,
        description="Fixed backoff between client retries in milliseconds"
    )
    start_timeout_seconds: float = Field(
        default=15.0,
        description="Session establishment timeout in seconds"
    )
    root_create_attempts: int = Field(
        default=3,
        description="Attempts to resolve a root path creation race"
    )

    @field_validator("connect_string")
    @classmethod
    def validate_connect_string(cls, v: str) -> str:
        """Validate connect string is not blank."""
        v = v.strip()
        if not v:
            raise ValueError("connect_string must not be empty")
        return v

    @field_validator("root_path")
    @classmethod
    def validate_root_path(cls, v: str) -> str:
        """Validate root path is absolute and normalize it."""
        if not v.startswith("/"):
            raise ValueError("root_path must start with '/'")
        return normalize_path(v)

    @field_validator("retry_delay_ms")
    @classmethod
    def validate_retry_delay(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("retry_delay_ms must be > 0")
        return v

    @field_validator("start_timeout_seconds")
    @classmethod
    def validate_start_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("start_timeout_seconds must be > 0")
        return v

    @field_validator("root_create_attempts")
    @classmethod
    def validate_root_create_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("root_create_attempts must be >= 1")
        return v

    @property
    def identity(self) -> ConnectionIdentity:
        """Connection identity used to share clients."""
        return ConnectionIdentity(self.connect_string, self.root_path)

    @property
    def retry_delay_seconds(self) -> float:
        return self.retry_delay_ms / 1000.0

    def client_factory(self) -> ClientFactory:
        """Factory for ClientRegistry building kazoo clients with these retry and timeout settings."""
        return kazoo_client_factory(
            retry_delay_seconds=self.retry_delay_seconds,
            start_timeout=self.start_timeout_seconds,
        )


def load_settings(**overrides: Any) -> ZookeeperConfigSettings:
    """Build settings from overrides and the environment.

    Args:
        **overrides: Explicit field values (highest precedence)

    Returns:
        Validated settings

    Raises:
        ConfigValidationError: If any field is invalid
    """
    try:
        settings = ZookeeperConfigSettings(**overrides)
    except ValidationError as e:
        field_errors = {
            ".".join(str(part) for part in error["loc"]): error["msg"]
            for error in e.errors()
        }
        logger.error(
            "Invalid ZooKeeper config settings",
            extra={"field_errors": field_errors},
        )
        raise ConfigValidationError(
            message=f"Invalid ZooKeeper config settings: {', '.join(field_errors)}",
            source="ZookeeperConfigSettings",
            field_errors=field_errors,
            original_error=e,
        ) from e

    logger.debug(
        "ZooKeeper config settings loaded",
        extra={
            "connect_string": settings.connect_string,
            "root_path": settings.root_path,
            "auto_refreshed": settings.auto_refreshed,
            "data_format": settings.data_format.value,
        },
    )
    return settings
