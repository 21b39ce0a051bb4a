"""Unit tests for the ordered composite source."""
from src.services.zookeeper_config.services.composite import CompositeConfigSource
from src.services.zookeeper_config.services.sources import ConfigSource, MISSING, NodeConfigSource


class StaticSource(ConfigSource):
    """Fixed in-memory source."""

    def __init__(self, name, values):
        super().__init__(name)
        self._values = dict(values)

    def _lookup(self, key):
        return self._values.get(key, MISSING)

    @property
    def property_names(self):
        return list(self._values)


def make_source(store, client, path, text, auto_refreshed=False):
    store.put(path, text)
    return NodeConfigSource(path, client, auto_refreshed=auto_refreshed).load()


def test_first_source_wins(store, client):
    """Should answer from the earliest source defining the key."""
    app = make_source(store, client, "/config/app", "port=8080\nname=app\n")
    db = make_source(store, client, "/config/db", "port=5432\npool=5\n")
    composite = CompositeConfigSource("zookeeper")
    composite.add_source(app)
    composite.add_source(db)

    assert composite.get("port") == "8080"
    assert composite.get("pool") == "5"
    assert composite.find_source("port") is app
    assert composite.find_source("pool") is db
    assert composite.find_source("missing") is None


def test_add_first_source_takes_precedence(store, client):
    app = make_source(store, client, "/config/app", "port=8080\n")
    override = make_source(store, client, "/config/override", "port=1\n")
    composite = CompositeConfigSource("zookeeper")
    composite.add_source(app)
    composite.add_first_source(override)

    assert composite.get("port") == "1"
    assert composite.source_names == ["/config/override", "/config/app"]


def test_none_value_shadows_later_sources():
    """Should treat a None value as defined."""
    composite = CompositeConfigSource("zookeeper")
    composite.add_source(StaticSource("/a", {"key": None}))
    composite.add_source(StaticSource("/b", {"key": "later"}))

    assert "key" in composite
    assert composite.get("key", "default") is None
    assert composite.find_source("key").name == "/a"


def test_property_names_union_in_order(store, client):
    composite = CompositeConfigSource("zookeeper")
    composite.add_source(make_source(store, client, "/config/app", "b=1\na=1\n"))
    composite.add_source(make_source(store, client, "/config/db", "a=2\nc=2\n"))

    assert composite.property_names == ["b", "a", "c"]
    assert composite.as_dict() == {"b": "1", "a": "1", "c": "2"}


def test_empty_composite():
    composite = CompositeConfigSource("zookeeper")

    assert len(composite) == 0
    assert composite.get("anything") is None
    assert composite.property_names == []


def test_sources_are_kept_without_deduplication(store, client):
    app = make_source(store, client, "/config/app", "a=1\n")
    composite = CompositeConfigSource("zookeeper")
    composite.add_source(app)
    composite.add_source(app)

    assert len(composite) == 2
    assert list(composite) == [app, app]


def test_updates_in_members_are_visible(store, client):
    """Should reflect live member updates on the next composite lookup."""
    app = make_source(store, client, "/config/app", "port=8080\n", auto_refreshed=True)
    composite = CompositeConfigSource("zookeeper")
    composite.add_source(app)

    store.put("/config/app", "port=9090\n")

    assert composite.get("port") == "9090"


def test_close_closes_members(store, client):
    """Should stop member updates; the watch ends on its next delivery."""
    app = make_source(store, client, "/config/app", "a=1\n", auto_refreshed=True)
    composite = CompositeConfigSource("zookeeper")
    composite.add_source(app)

    composite.close()

    assert app.closed
    assert not app.watching

    store.put("/config/app", "a=2\n")

    assert composite.get("a") == "1"
    assert store.watch_count("/config/app") == 0
