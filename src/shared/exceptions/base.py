"""Root of the loader's exception hierarchy."""
from typing import Optional, Dict, Any


class ZkConfigError(Exception):
    """Base exception for the ZooKeeper configuration loader.

    Carries a machine-readable ``error_code`` and a ``details`` dict so
    failures can be reported as structured data.

    ``retryable`` tells callers whether repeating the operation can succeed:
    the registry caches nothing on a failed connect, and a node-exists race
    resolves on the next existence check.

    Args:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., "ZK_CONNECTION_FAILED")
        details: Additional context as dictionary
        original: Exception being wrapped, if any
    """

    retryable = False

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original: Optional[Exception] = None,
    ):
        self.message = message
        self.error_code = error_code or "UNKNOWN_ERROR"
        self.details = details or {}
        self.original = original

        text = f"[{self.error_code}] {message}"
        if original is not None:
            text += f" (caused by: {type(original).__name__}: {original})"
        super().__init__(text)

    def to_dict(self) -> Dict[str, Any]:
        """Structured form of the error for logs and reports."""
        data = {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "exception_type": type(self).__name__,
            "retryable": self.retryable,
        }
        if self.original is not None:
            data["cause"] = type(self.original).__name__
        return data
