"""
Tests for the user management function.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from shared.test_helpers import LambdaContext, make_config, management_events
from service_management.app.handlers.users import UserManagementHandler


def body(response):
    return json.loads(response["body"])


@pytest.fixture
def handler(repository, config):
    return UserManagementHandler(repository, config)


class TestDispatch:
    """Test cases for operation dispatch shared by every management function."""

    def test_missing_operation(self, handler):
        response = handler({}, LambdaContext())

        assert response["statusCode"] == 400
        assert body(response) == {
            "error": "invalid_request",
            "error_description": "Missing operation parameter. Valid operations: createUser, resetPassword",
        }

    def test_unknown_operation(self, handler):
        response = handler({"operation": "deleteUser"})

        assert response["statusCode"] == 400
        assert body(response)["error_description"] == (
            "Unknown operation: deleteUser. Valid operations: createUser, resetPassword"
        )

    def test_non_mapping_event(self, handler):
        response = handler(None)
        assert body(response)["error_description"].startswith("Missing operation parameter")

    def test_cors_headers(self, handler):
        headers = handler({})["headers"]

        assert headers["Content-Type"] == "application/json"
        assert headers["Access-Control-Allow-Origin"] == "*"
        assert headers["Access-Control-Allow-Headers"] == "Content-Type,Authorization"
        assert headers["Access-Control-Allow-Methods"] == "GET,POST,OPTIONS"

    def test_unexpected_error_becomes_server_error(self, handler, repository):
        with patch.object(repository, "get_user_by_username", side_effect=RuntimeError("table unavailable")):
            response = handler(management_events.create_user())

        assert response["statusCode"] == 500
        assert body(response) == {
            "error": "server_error",
            "error_description": "Internal server error: table unavailable",
        }


class TestCreateUser:
    """Test cases for createUser."""

    def test_create_user(self, handler, store, config):
        response = handler(management_events.create_user())

        assert response["statusCode"] == 200
        result = body(response)
        assert result["message"] == "User created successfully"
        assert result["user"]["username"] == "alice123"
        assert result["user"]["email"] == "a@example.com"
        assert result["user"]["email_verified"] is False
        assert "password_hash" not in result["user"]
        assert len(result["user"]["user_id"]) == 36

        stored = store.items(config.users_table)[0]
        assert stored["password_hash"].startswith("$2")

    def test_duplicate_username(self, handler, store):
        handler(management_events.create_user())
        writes = len(store.writes)

        response = handler(management_events.create_user(email="other@example.com"))

        assert response["statusCode"] == 400
        assert body(response)["error_description"] == "Username already exists"
        assert len(store.writes) == writes

    def test_missing_fields(self, handler, store):
        response = handler({"operation": "createUser", "username": "alice123"})

        assert body(response)["error_description"] == (
            "Missing required parameters: username, password, and email are required"
        )
        assert store.writes == []

    @pytest.mark.parametrize("overrides,message", [
        ({"username": "ab"}, "Invalid username format"),
        ({"email": "not-an-email"}, "Invalid email format"),
        ({"password": "short"}, "Password must be at least 8 characters long"),
    ])
    def test_invalid_fields(self, handler, store, overrides, message):
        response = handler(management_events.create_user(**overrides))

        assert response["statusCode"] == 400
        assert body(response)["error_description"].startswith(message)
        assert store.writes == []

    def test_complexity_applies_when_enabled(self, repository):
        handler = UserManagementHandler(repository, make_config(enforce_password_complexity=True))

        response = handler(management_events.create_user(password="alllowercase"))

        assert response["statusCode"] == 400
        assert "uppercase letter" in body(response)["error_description"]

    def test_profile_is_not_stored(self, handler, store, config):
        handler(management_events.create_user(profile={"given_name": "Alice"}))

        assert "profile" not in store.items(config.users_table)[0]

    def test_password_never_logged(self, handler):
        handler.logger = MagicMock()

        handler(management_events.create_user())

        logged_event = handler.logger.info.call_args_list[0].kwargs["event"]
        assert logged_event["password"] == "***"
        assert logged_event["username"] == "alice123"
        assert "Passw0rd!" not in repr(handler.logger.mock_calls)


class TestResetPassword:
    """Test cases for resetPassword."""

    def test_reset_password(self, handler, repository):
        handler(management_events.create_user())

        response = handler(management_events.reset_password())

        assert response["statusCode"] == 200
        assert body(response) == {"message": "Password reset successfully", "username": "alice123"}
        assert repository.verify_user_password("alice123", "N3wPassw0rd!") is not None
        assert repository.verify_user_password("alice123", "Passw0rd!") is None

    def test_unknown_user(self, handler, store):
        response = handler(management_events.reset_password(username="nobody"))

        assert response["statusCode"] == 400
        assert body(response)["error_description"] == "User not found"
        assert store.writes == []

    def test_short_new_password(self, handler):
        handler(management_events.create_user())

        response = handler(management_events.reset_password(newPassword="short"))

        assert body(response)["error_description"] == "Password must be at least 8 characters long"

    def test_missing_new_password(self, handler):
        response = handler({"operation": "resetPassword", "username": "alice123"})

        assert body(response)["error_description"] == (
            "Missing required parameters: username and newPassword are required"
        )
