"""Closes shared coordination clients when the process exits."""
import atexit
import logging
import threading
from typing import Callable

from src.shared.coordination.registry import ClientRegistry

logger = logging.getLogger(__name__)


class ShutdownCoordinator:
    """Registers one exit callback that closes every client in a registry.

    The shutdown runs at most once; repeated or re-entrant calls are no-ops.

    Args:
        registry: Registry whose clients are closed on exit
        register: Exit-hook registration function (atexit.register by default)
    """

    def __init__(
        self,
        registry: ClientRegistry,
        register: Callable[[Callable[[], None]], object] = atexit.register,
    ):
        self.registry = registry
        self._register = register
        self._lock = threading.Lock()
        self._installed = False
        self._done = False

    def install(self) -> "ShutdownCoordinator":
        """Register the exit callback (only the first call has an effect)."""
        with self._lock:
            if self._installed:
                return self
            self._register(self.shutdown)
            self._installed = True
        logger.debug("Shutdown hook installed for coordination clients")
        return self

    def shutdown(self) -> None:
        """Close all clients in the registry once."""
        with self._lock:
            if self._done:
                logger.debug("Shutdown already performed, skipping")
                return
            self._done = True

        logger.info("Shutting down coordination clients...")
        self.registry.close_all()

    @property
    def installed(self) -> bool:
        return self._installed

    @property
    def done(self) -> bool:
        return self._done
