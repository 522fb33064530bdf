"""
Integration tests for the complete management flow across all four functions.
"""

import json

import pytest

from shared.test_helpers import (
    InMemoryDynamoDBStore,
    InMemoryParameterStore,
    LambdaContext,
    key_schema_for,
    make_config,
    management_events,
)
from service_management.app import main


def body(response):
    return json.loads(response["body"])


class TestManagementFlow:
    """Integration tests for provisioning a user into an application."""

    @pytest.fixture
    def config(self):
        """Test configuration."""
        return make_config()

    @pytest.fixture
    def store(self, config):
        """In-memory DynamoDB tables."""
        return InMemoryDynamoDBStore(key_schema_for(config))

    @pytest.fixture
    def parameter_store(self, config):
        """In-memory SSM parameters with an unprovisioned key placeholder."""
        parameters = InMemoryParameterStore()
        parameters.seed(config.issuer_url_param_name, "https://idp.example.com")
        parameters.seed(config.jwt_keys_param_name, "{}")
        return parameters

    @pytest.fixture(autouse=True)
    def services(self, config, store, parameter_store):
        """Wire the entry points to the in-memory stores."""
        services = main.create_services(config, store, parameter_store)
        main.set_services(services)
        yield services
        main.set_services(None)

    @pytest.fixture
    def context(self):
        """Lambda context."""
        return LambdaContext()

    def test_provision_user_into_application(self, context, store, config):
        """Create a user, client, application and mapping, then update each."""
        user = body(main.user_management(management_events.create_user(), context))["user"]

        response = main.client_management(management_events.create_client(), context)
        assert response["statusCode"] == 200

        response = main.application_management(management_events.create_application(), context)
        assert body(response)["application"]["application_id"] == "my-app-prod"

        response = main.user_application_management(
            management_events.create_user_application(user["user_id"]), context
        )
        assert response["statusCode"] == 200

        main.client_management(management_events.update_client(), context)
        main.application_management(management_events.update_application(), context)
        response = main.user_application_management(
            management_events.update_user_application(user["user_id"]), context
        )
        assert body(response)["user_application"]["account"] == "updated-account-id"

        assert store.items(config.clients_table)[0]["name"] == "My Updated Application"
        assert store.items(config.applications_table)[0]["name"] == "Production Environment - Updated"

    def test_mapping_requires_application(self, context, store, config):
        """A mapping for a missing application is rejected without writing."""
        user = body(main.user_management(management_events.create_user(), context))["user"]

        response = main.user_application_management(
            management_events.create_user_application(user["user_id"]), context
        )

        assert body(response)["error_description"] == (
            "Application ID not found. Please create the application first"
        )
        assert store.items(config.user_applications_table) == []

    def test_application_requires_client(self, context, store, config):
        """An application for a missing client is rejected without writing."""
        response = main.application_management(management_events.create_application(), context)

        assert body(response)["error_description"] == "Client ID not found. Please create the client first"
        assert store.items(config.applications_table) == []

    def test_password_reset_then_login_check(self, context, services):
        """Reset password and verify only the new password is accepted."""
        main.user_management(management_events.create_user(), context)
        main.user_management(management_events.reset_password(), context)

        repository = services.repository
        assert repository.verify_user_password("alice123", "N3wPassw0rd!") is not None
        assert repository.verify_user_password("alice123", "Passw0rd!") is None

    def test_tokens_signed_with_generated_key(self, services, parameter_store, config):
        """The first token generates and stores a key; later tokens reuse it."""
        tokens = services.token_service

        first = tokens.create_token({"sub": "user-1"})
        second = tokens.create_token({"sub": "user-2"})

        assert tokens.verify_token(first)["sub"] == "user-1"
        assert tokens.verify_token(second)["sub"] == "user-2"
        assert len(parameter_store.writes) == 1
        stored = json.loads(parameter_store.parameters[config.jwt_keys_param_name].value)
        assert services.token_service.key_manager.jwks()["keys"][0]["kid"] == stored["kid"]
