"""Root path resolution: existence, optional creation and child listing."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

import tenacity

from src.shared.exceptions.coordination import (
    CoordinationError,
    EnumerationError,
    PathStateError,
)
from src.shared.interfaces import ICoordinationClient

logger = logging.getLogger(__name__)


class RootPathState(Enum):
    """Existence state of a root path after resolution."""
    ABSENT = "absent"
    PRESENT = "present"
    JUST_CREATED = "just_created"


@dataclass(frozen=True)
class RootResolution:
    """Outcome of resolving a root path.

    ABSENT carries no children and means "no configuration". PRESENT and
    JUST_CREATED carry the child names in store order, possibly none.
    """

    root_path: str
    state: RootPathState
    children: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_absent(self) -> bool:
        return self.state is RootPathState.ABSENT


class PathResolver:
    """Checks, optionally creates, and enumerates a root path.

    When two loaders find the root missing at the same time, the loser's
    create fails with PathStateError. That failure is resolved by checking
    existence again, up to ``max_attempts`` times.

    Args:
        max_attempts: Existence checks allowed when creation races
    """

    def __init__(self, max_attempts: int = 3):
        self.max_attempts = max_attempts

    def resolve(
        self,
        client: ICoordinationClient,
        root_path: str,
        auto_refreshed: bool,
    ) -> RootResolution:
        """Resolve ``root_path`` on the store.

        Args:
            client: Started coordination client
            root_path: Root node to traverse
            auto_refreshed: Create the root when it is missing

        Returns:
            RootResolution with the state and the ordered child names

        Raises:
            EnumerationError: If the children cannot be listed
            CoordinationError: If existence cannot be checked or creation fails
        """
        state = self._ensure_root(client, root_path, auto_refreshed)

        if state is RootPathState.ABSENT:
            logger.info(
                f"Root path {root_path} does not exist and auto refresh is off",
                extra={"root_path": root_path},
            )
            return RootResolution(root_path, state)

        try:
            children = tuple(client.get_children(root_path))
        except CoordinationError as e:
            logger.error(
                f"Failed to list children of {root_path}: {e}",
                extra={"root_path": root_path},
            )
            raise EnumerationError(
                f"Failed to list configuration nodes under {root_path}",
                path=root_path,
                original=e,
            ) from e

        logger.debug(
            f"Resolved root path {root_path}",
            extra={"root_path": root_path, "state": state.value, "children": list(children)},
        )
        return RootResolution(root_path, state, children)

    def _ensure_root(
        self,
        client: ICoordinationClient,
        root_path: str,
        auto_refreshed: bool,
    ) -> RootPathState:
        retrying = tenacity.Retrying(
            stop=tenacity.stop_after_attempt(self.max_attempts),
            wait=tenacity.wait_none(),
            retry=tenacity.retry_if_exception_type(PathStateError),
            before_sleep=lambda rs: logger.warning(
                f"Root path {root_path} was created concurrently, re-checking "
                f"(attempt {rs.attempt_number}/{self.max_attempts})",
                extra={"root_path": root_path, "attempt": rs.attempt_number},
            ),
            reraise=True,
        )
        return retrying(self._check_or_create, client, root_path, auto_refreshed)

    @staticmethod
    def _check_or_create(
        client: ICoordinationClient,
        root_path: str,
        auto_refreshed: bool,
    ) -> RootPathState:
        if client.exists(root_path):
            return RootPathState.PRESENT
        if not auto_refreshed:
            return RootPathState.ABSENT

        client.create(root_path)
        logger.info(f"Created missing root path {root_path}", extra={"root_path": root_path})
        return RootPathState.JUST_CREATED
