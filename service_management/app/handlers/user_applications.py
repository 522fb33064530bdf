"""
User-application mapping management function.

Example events:

    {"operation": "createUserApplication",
     "user_id": "550e8400-e29b-41d4-a716-446655440000",
     "application_id": "my-app-prod", "account": "user-specific-account-id"}

    {"operation": "updateUserApplication",
     "user_id": "550e8400-e29b-41d4-a716-446655440000",
     "application_id": "my-app-prod", "account": "updated-account-id"}
"""

from typing import Any, Dict, Mapping

from shared.errors import InvalidRequestError
from ..persistence.repository import USER_APPLICATION_MUTABLE_FIELDS
from ..validation.validators import collect_updates, require_fields
from .base import ManagementHandler, Operation


class UserApplicationManagementHandler(ManagementHandler):
    """createUserApplication and updateUserApplication."""

    name = "user_applications"

    def _register_operations(self) -> Dict[str, Operation]:
        return {
            "createUserApplication": self.create_user_application,
            "updateUserApplication": self.update_user_application,
        }

    def create_user_application(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        require_fields(event, ["user_id", "application_id"])
        user_id = event["user_id"]
        application_id = event["application_id"]

        if self.repository.get_user_by_id(user_id) is None:
            raise InvalidRequestError("User ID not found. Please create the user first")

        if self.repository.get_application_by_id(application_id) is None:
            raise InvalidRequestError("Application ID not found. Please create the application first")

        if self.repository.get_user_application(user_id, application_id) is not None:
            raise InvalidRequestError(
                "User-application mapping already exists. Use updateUserApplication to modify it"
            )

        mapping = self.repository.create_user_application(
            user_id,
            application_id,
            event.get("account") or ""
        )

        return self.success(
            "User-application mapping created successfully",
            user_application=mapping.model_dump()
        )

    def update_user_application(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        require_fields(event, ["user_id", "application_id"])
        updates = collect_updates(event, ["user_id", "application_id"], USER_APPLICATION_MUTABLE_FIELDS)

        user_id = event["user_id"]
        application_id = event["application_id"]
        if self.repository.get_user_application(user_id, application_id) is None:
            raise InvalidRequestError(
                "User-application mapping not found. Use createUserApplication to create it first"
            )

        mapping = self.repository.update_user_application(user_id, application_id, updates)

        return self.success(
            "User-application mapping updated successfully",
            user_application=mapping.model_dump()
        )
