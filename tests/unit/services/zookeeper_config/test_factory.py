"""Unit tests for the unit source factory."""
from src.services.zookeeper_config.services.factory import NodeSourceFactory
from src.shared.utils.config.decoders import DataFormat


def test_create_binds_child_path(client):
    """Should bind the unit to root + "/" + child and leave it unloaded."""
    source = NodeSourceFactory().create("/config", "app", client, auto_refreshed=True)

    assert source.path == "/config/app"
    assert source.name == "/config/app"
    assert source.client is client
    assert source.auto_refreshed is True
    assert len(source) == 0
    assert source.version is None


def test_create_normalizes_trailing_slash(client):
    source = NodeSourceFactory().create("/config/", "db", client, auto_refreshed=False)

    assert source.path == "/config/db"


def test_create_uses_requested_format(client):
    factory = NodeSourceFactory()

    assert factory.create("/c", "a", client, False).decoder.data_format is DataFormat.PROPERTIES
    assert factory.create("/c", "b", client, False, DataFormat.JSON).decoder.data_format is DataFormat.JSON


def test_decoders_are_shared_per_format():
    factory = NodeSourceFactory(default_format="yaml")

    assert factory.decoder_for() is factory.decoder_for(DataFormat.YAML)
    assert factory.decoder_for(DataFormat.JSON) is not factory.decoder_for()
