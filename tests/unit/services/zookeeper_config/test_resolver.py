"""Unit tests for root path resolution."""
from unittest.mock import MagicMock

import pytest

from src.services.zookeeper_config.services.resolver import PathResolver, RootPathState
from src.shared.exceptions import CoordinationError, EnumerationError, PathStateError


def test_existing_root_lists_children_in_store_order(store, client):
    store.put("/config/db", "a=1")
    store.put("/config/app", "b=2")

    resolution = PathResolver().resolve(client, "/config", auto_refreshed=False)

    assert resolution.state is RootPathState.PRESENT
    assert resolution.children == ("db", "app")
    assert not resolution.is_absent


def test_missing_root_without_auto_refresh_is_absent(store, client):
    """Should report ABSENT and leave the store untouched."""
    resolution = PathResolver().resolve(client, "/config", auto_refreshed=False)

    assert resolution.is_absent
    assert resolution.children == ()
    assert not store.exists("/config")


def test_missing_root_with_auto_refresh_is_created(store, client):
    """Should create the root (and parents) and report it just created."""
    resolution = PathResolver().resolve(client, "/services/app/config", auto_refreshed=True)

    assert resolution.state is RootPathState.JUST_CREATED
    assert resolution.children == ()
    assert store.exists("/services/app/config")


def test_existing_empty_root_is_present_with_no_children(store, client):
    store.create("/config")

    resolution = PathResolver().resolve(client, "/config", auto_refreshed=True)

    assert resolution.state is RootPathState.PRESENT
    assert resolution.children == ()


def test_concurrent_root_creation_resolves_to_present():
    """Should re-check existence when another creator wins the race."""
    client = MagicMock()
    client.exists.side_effect = [False, True]
    client.create.side_effect = PathStateError("Node already exists: /config", path="/config")
    client.get_children.return_value = ["app"]

    resolution = PathResolver().resolve(client, "/config", auto_refreshed=True)

    assert resolution.state is RootPathState.PRESENT
    assert resolution.children == ("app",)
    assert client.exists.call_count == 2
    assert client.create.call_count == 1


def test_persistent_creation_race_gives_up():
    """Should re-raise PathStateError after the configured attempts."""
    client = MagicMock()
    client.exists.return_value = False
    client.create.side_effect = PathStateError("Node already exists: /config", path="/config")

    with pytest.raises(PathStateError):
        PathResolver(max_attempts=2).resolve(client, "/config", auto_refreshed=True)

    assert client.create.call_count == 2


def test_existence_check_failure_propagates():
    client = MagicMock()
    client.exists.side_effect = CoordinationError("connection lost", path="/config")

    with pytest.raises(CoordinationError):
        PathResolver().resolve(client, "/config", auto_refreshed=False)

    client.get_children.assert_not_called()


def test_child_listing_failure_raises_enumeration_error(store, client):
    """Should surface a listing failure instead of an empty composite."""
    store.create("/config")
    store.fail_on("get_children", "/config", CoordinationError("connection lost", path="/config"))

    with pytest.raises(EnumerationError) as exc_info:
        PathResolver().resolve(client, "/config", auto_refreshed=False)

    assert exc_info.value.path == "/config"
    assert isinstance(exc_info.value.original, CoordinationError)
