import pytest

from pasturepickup.config.settings import Settings
from pasturepickup.core.errors import MapProviderError
from pasturepickup.maps.provider import MapProvider, load_map_config


def _settings(token="pk.test") -> Settings:
    return Settings.model_validate({"maps": {"access_token": token}})


def test_load_map_config_requires_token(monkeypatch):
    monkeypatch.delenv("MAPBOX_ACCESS_TOKEN", raising=False)
    with pytest.raises(MapProviderError, match="MAPBOX_ACCESS_TOKEN"):
        load_map_config(_settings(token="  "))

    config = load_map_config(_settings())
    assert config.access_token == "pk.test"
    assert config.default_center == (-98.5795, 39.8283)


def test_initialize_runs_loader_once():
    calls = []

    def loader(settings):
        calls.append(settings)
        return load_map_config(settings)

    provider = MapProvider(_settings(), loader=loader)
    assert not provider.is_ready

    first = provider.initialize()
    second = provider.initialize()
    assert first is second
    assert len(calls) == 1
    assert provider.is_ready
    assert provider.config().access_token == "pk.test"


def test_when_ready_runs_immediately_once_ready_and_after_initialize():
    provider = MapProvider(_settings())
    seen = []

    provider.when_ready(lambda cfg: seen.append(("early", cfg.access_token)))
    assert seen == []

    provider.initialize()
    provider.when_ready(lambda cfg: seen.append(("late", cfg.access_token)))
    assert seen == [("early", "pk.test"), ("late", "pk.test")]


def test_failed_initialization_skips_callbacks_and_reraises(monkeypatch):
    monkeypatch.delenv("MAPBOX_ACCESS_TOKEN", raising=False)
    provider = MapProvider(_settings(token=None))
    seen = []
    provider.when_ready(seen.append)

    with pytest.raises(MapProviderError):
        provider.config()
    assert seen == []
    assert not provider.is_ready


def test_failed_initialization_can_be_retried():
    attempts = []

    def flaky_loader(settings):
        attempts.append(settings)
        if len(attempts) == 1:
            raise MapProviderError("token not provisioned yet")
        return load_map_config(settings)

    provider = MapProvider(_settings(), loader=flaky_loader)
    seen = []
    provider.when_ready(lambda cfg: seen.append(cfg.access_token))

    failed = provider.initialize()
    assert isinstance(failed.exception(), MapProviderError)
    assert seen == []

    retried = provider.initialize()
    assert retried is not failed
    assert retried.result().access_token == "pk.test"
    assert provider.is_ready
    assert seen == ["pk.test"]

    # Success is final.
    assert provider.initialize() is retried
    assert len(attempts) == 2


def test_token_exported_after_a_failure_is_picked_up(monkeypatch):
    monkeypatch.delenv("MAPBOX_ACCESS_TOKEN", raising=False)
    provider = MapProvider(_settings(token=None))
    with pytest.raises(MapProviderError):
        provider.config()

    monkeypatch.setenv("MAPBOX_ACCESS_TOKEN", "pk.late")
    assert provider.config().access_token == "pk.late"
