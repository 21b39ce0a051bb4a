"""Coordination store (ZooKeeper) exceptions."""
from typing import List, Optional

from src.shared.exceptions.base import ZkConfigError


class CoordinationError(ZkConfigError):
    """Base exception for coordination store failures.

    Args:
        message: Human-readable error message
        path: Remote node path involved, if any
        error_code: Machine-readable error code
        original: Underlying client exception
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        error_code: str = "ZK_OPERATION_FAILED",
        original: Optional[Exception] = None,
    ):
        details = {}
        if path is not None:
            details["path"] = path
        super().__init__(message, error_code=error_code, details=details, original=original)
        self.path = path


class ConnectionError(CoordinationError):
    """Client could not be constructed or started.

    Raised when:
    - The connect string is rejected by the client
    - The session is not established within the start timeout
    - The client registry has already been shut down
    """

    retryable = True

    def __init__(
        self,
        message: str,
        connect_string: Optional[str] = None,
        original: Optional[Exception] = None,
    ):
        super().__init__(message, error_code="ZK_CONNECTION_FAILED", original=original)
        self.connect_string = connect_string
        if connect_string is not None:
            self.details["connect_string"] = connect_string


class PathStateError(CoordinationError):
    """Node already exists when trying to create it.

    Raised when a concurrent creator wins the race to create a path.
    Callers resolve it by re-checking existence.
    """

    retryable = True

    def __init__(self, message: str, path: Optional[str] = None, original: Optional[Exception] = None):
        super().__init__(message, path=path, error_code="ZK_NODE_EXISTS", original=original)


class EnumerationError(CoordinationError):
    """Listing the children of a node failed."""

    def __init__(self, message: str, path: Optional[str] = None, original: Optional[Exception] = None):
        super().__init__(message, path=path, error_code="ZK_ENUMERATION_FAILED", original=original)


class ShutdownError(CoordinationError):
    """One or more clients failed to close during shutdown.

    Attributes:
        failed: Registry keys of the clients whose close raised
    """

    def __init__(self, message: str, failed: Optional[List[str]] = None):
        super().__init__(message, error_code="ZK_SHUTDOWN_FAILED")
        self.failed = failed or []
        self.details["failed"] = self.failed
