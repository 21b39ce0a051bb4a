"""Unit tests for the shared client registry."""
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.shared.coordination.paths import ConnectionIdentity
from src.shared.coordination.registry import ClientRegistry
from src.shared.exceptions import ConnectionError, ShutdownError
from src.shared.interfaces import ClientState
from src.shared.testing.mocks import InMemoryCoordinationClient


IDENTITY = ConnectionIdentity("zk:2181", "/config")


def test_get_or_create_starts_client_on_first_request(registry, client_factory):
    """Should build and start a client the first time an identity is requested."""
    client = registry.get_or_create(IDENTITY)

    assert client.state is ClientState.STARTED
    assert client.connect_string == "zk:2181"
    assert client_factory.created == [client]
    assert IDENTITY in registry


def test_get_or_create_returns_same_client_for_same_identity(registry, client_factory):
    """Should share one client per identity."""
    first = registry.get_or_create(IDENTITY)
    second = registry.get_or_create(ConnectionIdentity("zk:2181", "/config"))

    assert first is second
    assert first.start_count == 1
    assert len(client_factory.created) == 1


def test_different_root_paths_get_different_clients(registry):
    """Should treat a different root path as a different identity."""
    first = registry.get_or_create(ConnectionIdentity("zk:2181", "/a"))
    second = registry.get_or_create(ConnectionIdentity("zk:2181", "/b"))

    assert first is not second
    assert len(registry) == 2


def test_concurrent_requests_build_one_client(store):
    """Should construct exactly one client when many threads race on one identity."""
    built = []
    lock = threading.Lock()

    def slow_factory(identity):
        time.sleep(0.05)
        client = InMemoryCoordinationClient(store, connect_string=identity.connect_string)
        with lock:
            built.append(client)
        return client

    registry = ClientRegistry(client_factory=slow_factory)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: registry.get_or_create(IDENTITY), range(16)))

    assert len(built) == 1
    assert all(result is built[0] for result in results)
    assert built[0].start_count == 1

    registry.close_all()


def test_construction_does_not_block_other_identities(store):
    """Should let other identities proceed while one identity is being built."""
    blocked = ConnectionIdentity("slow:2181", "/config")
    release = threading.Event()
    entered = threading.Event()

    def factory(identity):
        if identity == blocked:
            entered.set()
            release.wait(timeout=5)
        return InMemoryCoordinationClient(store, connect_string=identity.connect_string)

    registry = ClientRegistry(client_factory=factory)

    with ThreadPoolExecutor(max_workers=1) as pool:
        pending = pool.submit(registry.get_or_create, blocked)
        assert entered.wait(timeout=5)

        other = registry.get_or_create(IDENTITY)
        assert other.state is ClientState.STARTED
        assert not pending.done()

        release.set()
        assert pending.result(timeout=5).state is ClientState.STARTED

    registry.close_all()


def test_failed_start_is_not_cached(store):
    """Should propagate a start failure and retry construction on the next request."""
    attempts = []

    def factory(identity):
        error = RuntimeError("no session") if not attempts else None
        client = InMemoryCoordinationClient(store, fail_start=error)
        attempts.append(client)
        return client

    registry = ClientRegistry(client_factory=factory)

    with pytest.raises(ConnectionError):
        registry.get_or_create(IDENTITY)

    assert IDENTITY not in registry

    client = registry.get_or_create(IDENTITY)
    assert client is attempts[1]
    assert client.state is ClientState.STARTED

    registry.close_all()


def test_factory_error_is_wrapped_in_connection_error():
    """Should wrap arbitrary construction failures."""

    def factory(identity):
        raise ValueError("bad connect string")

    registry = ClientRegistry(client_factory=factory)

    with pytest.raises(ConnectionError) as exc_info:
        registry.get_or_create(IDENTITY)

    assert isinstance(exc_info.value.original, ValueError)
    assert exc_info.value.connect_string == "zk:2181"
    assert len(registry) == 0


def test_close_all_closes_started_clients_and_clears(registry):
    """Should close every started client and empty the registry."""
    first = registry.get_or_create(ConnectionIdentity("zk:2181", "/a"))
    second = registry.get_or_create(ConnectionIdentity("zk:2181", "/b"))

    closed = registry.close_all()

    assert closed == 2
    assert first.state is ClientState.CLOSED
    assert second.state is ClientState.CLOSED
    assert len(registry) == 0
    assert registry.is_shut_down


def test_close_all_skips_clients_not_started(store):
    """Should only close clients in the STARTED state."""
    registry = ClientRegistry(client_factory=lambda identity: InMemoryCoordinationClient(store))
    client = registry.get_or_create(IDENTITY)
    client.close()

    assert registry.close_all() == 0
    assert client.close_count == 1


def test_close_all_isolates_failures(store):
    """Should keep closing remaining clients when one close raises."""

    class FailingClose(InMemoryCoordinationClient):
        def close(self):
            raise RuntimeError("close failed")

    def factory(identity):
        cls = FailingClose if identity.root_path == "/bad" else InMemoryCoordinationClient
        return cls(store, connect_string=identity.connect_string)

    registry = ClientRegistry(client_factory=factory)
    registry.get_or_create(ConnectionIdentity("zk:2181", "/bad"))
    good = registry.get_or_create(ConnectionIdentity("zk:2181", "/good"))

    assert registry.close_all() == 1
    assert good.state is ClientState.CLOSED


def test_close_all_raises_shutdown_error_when_requested(store):
    """Should report failed keys after attempting every close."""

    class FailingClose(InMemoryCoordinationClient):
        def close(self):
            raise RuntimeError("close failed")

    registry = ClientRegistry(client_factory=lambda identity: FailingClose(store))
    registry.get_or_create(IDENTITY)

    with pytest.raises(ShutdownError) as exc_info:
        registry.close_all(raise_on_error=True)

    assert exc_info.value.failed == [IDENTITY.key]


def test_close_all_is_idempotent(registry):
    """Should do nothing on a second call."""
    client = registry.get_or_create(IDENTITY)

    assert registry.close_all() == 1
    assert registry.close_all() == 0
    assert client.close_count == 1


def test_get_or_create_after_shutdown_raises(registry):
    """Should refuse to hand out clients once shut down."""
    registry.close_all()

    with pytest.raises(ConnectionError, match="shut down"):
        registry.get_or_create(IDENTITY)


def test_clients_returns_snapshot(registry):
    """Should return a copy keyed by identity key."""
    client = registry.get_or_create(IDENTITY)
    snapshot = registry.clients()

    snapshot.clear()

    assert registry.clients() == {IDENTITY.key: client}


def test_shutdown_error_is_not_retryable(registry):
    """Should flag refusals after shutdown as permanent."""
    registry.close_all()

    with pytest.raises(ConnectionError) as exc_info:
        registry.get_or_create(IDENTITY)

    assert exc_info.value.retryable is False
    assert exc_info.value.to_dict()["retryable"] is False


def test_failed_start_is_retryable(store):
    registry = ClientRegistry(
        client_factory=lambda identity: InMemoryCoordinationClient(store, fail_start=OSError("refused"))
    )

    with pytest.raises(ConnectionError) as exc_info:
        registry.get_or_create(IDENTITY)

    assert exc_info.value.retryable is True
