"""
Entity models for the identity provider management plane.

Every entity is stored as a flat DynamoDB item. Constructors stamp
identifiers and ISO-8601 UTC timestamps; `to_item()` returns the exact item
written to the table.
"""

import base64
import secrets
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now_iso() -> str:
    """Current UTC time as `2026-01-01T00:00:00.000Z`."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_id() -> str:
    return str(uuid.uuid4())


class Entity(BaseModel):
    """Base for stored entities."""

    model_config = ConfigDict(extra="ignore")

    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)

    def to_item(self) -> Dict[str, Any]:
        return self.model_dump()


class User(Entity):
    """An end user of the identity provider."""

    user_id: str = Field(default_factory=new_id)
    username: str
    password_hash: str
    email: str
    email_verified: bool = False

    def public_view(self) -> Dict[str, Any]:
        """User as returned to callers, without the password hash."""
        return self.model_dump(exclude={"password_hash"})


class Client(Entity):
    """A registered OAuth client."""

    client_id: str
    client_secret: str
    redirect_uris: List[str]
    name: str
    description: str = ""


class Application(Entity):
    """An application instance bound to an OAuth client."""

    application_id: str = Field(default_factory=new_id)
    client_id: str
    name: str
    description: str = ""
    account: str = ""


class UserApplication(Entity):
    """Per-user configuration for an application."""

    user_id: str
    application_id: str
    account: str = ""


class AuthorizationCode(BaseModel):
    """Single-use code issued by the authorization endpoint."""

    model_config = ConfigDict(extra="ignore")

    code: str = Field(default_factory=lambda: base64.urlsafe_b64encode(
        secrets.token_bytes(32)).decode("ascii").rstrip("="))
    user_id: str
    client_id: str
    redirect_uri: str
    scope: str
    expires_at: int
    created_at: str = Field(default_factory=utc_now_iso)
    code_challenge: Optional[str] = None
    code_challenge_method: Optional[str] = None
    application_id: Optional[str] = None
    account: Optional[str] = None

    def is_expired(self, now: Optional[float] = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at

    def to_item(self) -> Dict[str, Any]:
        # application_id and account are only stored when present
        item = self.model_dump(exclude={"application_id", "account"})
        if self.application_id:
            item["application_id"] = self.application_id
        if self.account:
            item["account"] = self.account
        return item


class RefreshToken(BaseModel):
    """Long-lived refresh token record. Revoked by deleting it."""

    model_config = ConfigDict(extra="ignore")

    token_id: str = Field(default_factory=new_id)
    user_id: str
    client_id: str
    scope: str
    expires_at: int
    created_at: str = Field(default_factory=utc_now_iso)

    def is_expired(self, now: Optional[float] = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at

    def to_item(self) -> Dict[str, Any]:
        return self.model_dump()


class SigningKeys(BaseModel):
    """RSA key material stored as JSON in the parameter store."""

    model_config = ConfigDict(populate_by_name=True)

    private_key: str
    public_key: str
    key_id: str = Field(alias="kid")
    algorithm: str = Field(default="RS256", alias="alg")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
