"""
Application management function.

Example events:

    {"operation": "createApplication", "client_id": "my-app-client",
     "name": "Production Environment", "account": "prod-account-123"}

    {"operation": "createApplication", "application_id": "my-app-prod",
     "client_id": "my-app-client", "name": "Production Environment"}

    {"operation": "updateApplication", "application_id": "my-app-prod",
     "name": "Production Environment - Updated",
     "account": "new-prod-account-456"}

Without an application_id a UUID is generated.
"""

from typing import Any, Dict, Mapping

from shared.errors import InvalidRequestError
from ..persistence.repository import APPLICATION_MUTABLE_FIELDS
from ..validation.validators import (
    collect_updates,
    is_blank,
    require_fields,
    validate_identifier,
)
from .base import ManagementHandler, Operation


class ApplicationManagementHandler(ManagementHandler):
    """createApplication and updateApplication."""

    name = "applications"

    def _register_operations(self) -> Dict[str, Operation]:
        return {
            "createApplication": self.create_application,
            "updateApplication": self.update_application,
        }

    def create_application(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        require_fields(event, ["client_id", "name"])

        application_id = event.get("application_id")
        if is_blank(application_id):
            application_id = None
        else:
            validate_identifier(application_id, "application_id")

        client_id = event["client_id"]
        if self.repository.get_client_by_id(client_id) is None:
            raise InvalidRequestError("Client ID not found. Please create the client first")

        if application_id and self.repository.get_application_by_id(application_id) is not None:
            raise InvalidRequestError("Application ID already exists")

        application = self.repository.create_application(
            application_id,
            client_id,
            event["name"],
            event.get("description") or "",
            event.get("account") or ""
        )

        return self.success("Application created successfully", application=application.model_dump())

    def update_application(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        require_fields(event, ["application_id"])
        updates = collect_updates(event, ["application_id"], APPLICATION_MUTABLE_FIELDS)

        if "client_id" in updates:
            client_id = updates["client_id"]
            if is_blank(client_id) or self.repository.get_client_by_id(client_id) is None:
                raise InvalidRequestError("Client ID not found. Cannot update to non-existent client")

        application_id = event["application_id"]
        if self.repository.get_application_by_id(application_id) is None:
            raise InvalidRequestError("Application not found")

        application = self.repository.update_application(application_id, updates)

        return self.success("Application updated successfully", application=application.model_dump())
