"""
OAuth client management function.

Example events:

    {"operation": "createClient", "client_id": "my-app-client",
     "client_secret": "my-secure-secret-123",
     "redirect_uris": ["https://myapp.example.com/callback"],
     "name": "My Application", "description": "My awesome application"}

    {"operation": "updateClient", "client_id": "my-app-client",
     "redirect_uris": ["https://myapp.example.com/callback",
                       "https://myapp.example.com/auth/callback"],
     "name": "My Updated Application"}
"""

from typing import Any, Dict, Mapping

from shared.errors import InvalidRequestError
from ..persistence.repository import CLIENT_MUTABLE_FIELDS
from ..validation.validators import (
    collect_updates,
    require_fields,
    validate_identifier,
    validate_redirect_uris,
)
from .base import ManagementHandler, Operation


class ClientManagementHandler(ManagementHandler):
    """createClient and updateClient."""

    name = "clients"

    def _register_operations(self) -> Dict[str, Operation]:
        return {
            "createClient": self.create_client,
            "updateClient": self.update_client,
        }

    def create_client(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        require_fields(event, ["client_id", "client_secret", "redirect_uris", "name"])

        client_id = event["client_id"]
        validate_identifier(client_id, "client_id")
        validate_redirect_uris(event["redirect_uris"])

        if self.repository.get_client_by_id(client_id) is not None:
            raise InvalidRequestError("Client ID already exists")

        client = self.repository.create_client(
            client_id,
            event["client_secret"],
            event["redirect_uris"],
            event["name"],
            event.get("description") or ""
        )

        return self.success("Client created successfully", client=client.model_dump())

    def update_client(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        require_fields(event, ["client_id"])
        updates = collect_updates(event, ["client_id"], CLIENT_MUTABLE_FIELDS)

        if "redirect_uris" in updates:
            validate_redirect_uris(updates["redirect_uris"])

        client_id = event["client_id"]
        if self.repository.get_client_by_id(client_id) is None:
            raise InvalidRequestError("Client not found")

        client = self.repository.update_client(client_id, updates)

        return self.success("Client updated successfully", client=client.model_dump())
