"""
Unit tests for the TTL cache and the issuer URL provider built on it.
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import EndpointConnectionError

from shared.cache import TTLCache
from shared.config import IdentityProviderConfig
from shared.errors import ConfigurationError
from shared.test_helpers import InMemoryParameterStore, make_config
from service_management.app.security.issuer import IssuerUrlProvider


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestTTLCache:
    """Test cases for TTLCache."""

    def test_miss_returns_none(self):
        assert TTLCache(60).get("missing") is None

    def test_value_served_within_ttl(self):
        clock = FakeClock()
        cache = TTLCache(300, clock=clock)
        cache.set("issuer", "https://a")

        clock.now += 299
        assert cache.get("issuer") == "https://a"

    def test_value_expires_at_ttl(self):
        clock = FakeClock()
        cache = TTLCache(300, clock=clock)
        cache.set("issuer", "https://a")

        clock.now += 300
        assert cache.get("issuer") is None

    def test_get_or_load_calls_loader_once_within_ttl(self):
        clock = FakeClock()
        cache = TTLCache(300, clock=clock)
        loader = MagicMock(return_value="value")

        assert cache.get_or_load("name", loader) == "value"
        clock.now += 10
        assert cache.get_or_load("name", loader) == "value"
        loader.assert_called_once()

    def test_get_or_load_refreshes_after_ttl(self):
        clock = FakeClock()
        cache = TTLCache(300, clock=clock)
        loader = MagicMock(side_effect=["first", "second"])

        assert cache.get_or_load("name", loader) == "first"
        clock.now += 301
        assert cache.get_or_load("name", loader) == "second"

    def test_entries_keyed_by_name(self):
        cache = TTLCache(300)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.get("a") == 1
        assert cache.get("b") == 2

    def test_loader_error_propagates(self):
        cache = TTLCache(300)
        with pytest.raises(RuntimeError):
            cache.get_or_load("name", MagicMock(side_effect=RuntimeError("boom")))
        assert cache.get("name") is None

    def test_invalidate_and_clear(self):
        cache = TTLCache(300)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.invalidate("a")
        assert cache.get("a") is None
        cache.clear()
        assert cache.get("b") is None


class TestIdentityProviderConfig:
    """Test cases for environment-driven configuration."""

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("USERS_TABLE", "prod-users")
        monkeypatch.setenv("CONFIG_CACHE_TTL_SECONDS", "60")
        monkeypatch.setenv("ENFORCE_PASSWORD_COMPLEXITY", "true")

        config = IdentityProviderConfig()

        assert config.users_table == "prod-users"
        assert config.config_cache_ttl_seconds == 60
        assert config.enforce_password_complexity is True

    def test_defaults(self):
        config = make_config()
        assert config.config_cache_ttl_seconds == 300
        assert config.token_ttl_seconds == 3600
        assert config.username_index == "username-index"


class TestIssuerUrlProvider:
    """Test cases for IssuerUrlProvider."""

    @pytest.fixture
    def config(self):
        return make_config()

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def parameters(self, config):
        store = InMemoryParameterStore()
        store.seed(config.issuer_url_param_name, "https://idp.example.com")
        return store

    @pytest.fixture
    def provider(self, parameters, config, clock):
        return IssuerUrlProvider(parameters, config, TTLCache(config.config_cache_ttl_seconds, clock=clock))

    def test_returns_parameter_value(self, provider):
        assert provider.get_issuer_url() == "https://idp.example.com"

    def test_single_read_within_ttl(self, provider, parameters, clock):
        provider.get_issuer_url()
        clock.now += 100
        provider.get_issuer_url()
        assert parameters.reads == 1

    def test_new_value_after_ttl(self, provider, parameters, config, clock):
        provider.get_issuer_url()
        parameters.seed(config.issuer_url_param_name, "https://new.example.com")

        clock.now += 10
        assert provider.get_issuer_url() == "https://idp.example.com"

        clock.now += 300
        assert provider.get_issuer_url() == "https://new.example.com"
        assert parameters.reads == 2

    def test_missing_parameter(self, config):
        provider = IssuerUrlProvider(InMemoryParameterStore(), config, TTLCache(300))
        with pytest.raises(ConfigurationError) as exc_info:
            provider.get_issuer_url()
        assert exc_info.value.message == "OIDC issuer URL parameter not found in SSM"

    def test_access_denied(self, provider, parameters, config):
        parameters.denied.add(config.issuer_url_param_name)
        with pytest.raises(ConfigurationError) as exc_info:
            provider.get_issuer_url()
        assert exc_info.value.message == "Access denied to OIDC issuer URL parameter"

    def test_transport_failure(self, config):
        store = MagicMock()
        store.get_parameter.side_effect = EndpointConnectionError(endpoint_url="https://ssm")
        provider = IssuerUrlProvider(store, config, TTLCache(300))

        with pytest.raises(ConfigurationError) as exc_info:
            provider.get_issuer_url()
        assert exc_info.value.message.startswith("Failed to retrieve OIDC issuer URL:")
