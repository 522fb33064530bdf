"""
Shared fixtures for management function tests.
"""

import pytest

from shared.test_helpers import (
    InMemoryDynamoDBStore,
    InMemoryParameterStore,
    key_schema_for,
    make_config,
)
from service_management.app.persistence.repository import IdentityRepository
from service_management.app.security.passwords import PasswordHasher


ISSUER_URL = "https://idp.example.com"


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def store(config):
    return InMemoryDynamoDBStore(key_schema_for(config))


@pytest.fixture
def repository(store, config):
    return IdentityRepository(store, config, PasswordHasher(config.bcrypt_rounds))


@pytest.fixture
def parameter_store(config):
    parameters = InMemoryParameterStore()
    parameters.seed(config.issuer_url_param_name, ISSUER_URL)
    parameters.seed(config.jwt_keys_param_name, "{}")
    return parameters
