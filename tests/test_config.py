import dataclasses

import pytest

from core.config import AppSettings, GatewayConfig, get_settings, parse_key_map, reset_settings, split_providers
from core.errors import ConfigError


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Fixture to mock environment variables."""
    monkeypatch.setenv("PROVIDERS", "https://a.example/ask, https://b.example/s?q= ,,")
    monkeypatch.setenv("KEY_MAP", "https://a.example|tok-a,https://b.example|tok-b")
    monkeypatch.setenv("PROVIDER_TIMEOUT", "5000")
    monkeypatch.setenv("PROVIDER_ATTEMPTS", "3")
    monkeypatch.setenv("CACHE_TTL", "60")
    return monkeypatch


def test_settings_defaults(monkeypatch):
    for name in ("PROVIDERS", "KEY_MAP", "PROVIDER_TIMEOUT", "PROVIDER_ATTEMPTS", "PROVIDER_BACKOFF", "CACHE_TTL"):
        monkeypatch.delenv(name, raising=False)
    settings = AppSettings(_env_file=None)
    assert settings.PROVIDER_TIMEOUT == 7000
    assert settings.PROVIDER_ATTEMPTS == 2
    assert settings.PROVIDER_BACKOFF == 200
    assert settings.CACHE_TTL == 30
    assert settings.PORT == 5000


def test_gateway_config_from_env(mock_env_vars):
    config = GatewayConfig.from_settings(AppSettings(_env_file=None))
    assert config.providers == ("https://a.example/ask", "https://b.example/s?q=")
    assert dict(config.credentials) == {"https://a.example": "tok-a", "https://b.example": "tok-b"}
    assert config.timeout == 5.0
    assert config.attempts == 3
    assert config.backoff == 0.2
    assert config.cache_ttl == 60.0


def test_get_settings_is_a_singleton(mock_env_vars):
    reset_settings()
    try:
        assert get_settings() is get_settings()
        assert get_settings().PROVIDER_ATTEMPTS == 3
    finally:
        reset_settings()


def test_invalid_attempts_raise_config_error():
    with pytest.raises(ConfigError):
        GatewayConfig(attempts=0)
    with pytest.raises(ConfigError):
        GatewayConfig(timeout=0)


def test_gateway_config_is_immutable():
    config = GatewayConfig(credentials={"p": "k"})
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.attempts = 5
    with pytest.raises(TypeError):
        config.credentials["q"] = "x"


def test_parse_key_map():
    table = parse_key_map(" https://a | k1 ,bad-pair,|nokey,https://b|,https://c|k3|extra,https://a|k1b")
    assert list(table) == ["https://a", "https://c"]
    assert table["https://a"] == "k1b"
    assert table["https://c"] == "k3"
    assert parse_key_map(None) == {}


def test_split_providers():
    assert split_providers(" a , b,, ") == ["a", "b"]
    assert split_providers("") == []
