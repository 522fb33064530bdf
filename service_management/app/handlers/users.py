"""
User management function.

Example events:

    {"operation": "createUser", "username": "newuser",
     "password": "SecurePassword123!", "email": "newuser@example.com"}

    {"operation": "resetPassword", "username": "existinguser",
     "newPassword": "NewSecurePassword123!"}
"""

from typing import Any, Dict, Mapping

from shared.errors import InvalidRequestError
from ..validation.validators import (
    require_fields,
    validate_email,
    validate_password,
    validate_username,
)
from .base import ManagementHandler, Operation


class UserManagementHandler(ManagementHandler):
    """createUser and resetPassword."""

    name = "users"

    def _register_operations(self) -> Dict[str, Operation]:
        return {
            "createUser": self.create_user,
            "resetPassword": self.reset_password,
        }

    def create_user(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        require_fields(event, ["username", "password", "email"])

        username = event["username"]
        validate_username(username)
        validate_email(event["email"])
        validate_password(event["password"], self.config.enforce_password_complexity)

        if self.repository.get_user_by_username(username) is not None:
            raise InvalidRequestError("Username already exists")

        user = self.repository.create_user(username, event["password"], event["email"])

        return self.success("User created successfully", user=user.public_view())

    def reset_password(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        require_fields(event, ["username", "newPassword"])
        validate_password(event["newPassword"], self.config.enforce_password_complexity)

        username = event["username"]
        user = self.repository.get_user_by_username(username)
        if user is None:
            raise InvalidRequestError("User not found")

        self.repository.update_user_password(user.user_id, event["newPassword"])

        return self.success("Password reset successfully", username=username)
