"""
Entity operations over the DynamoDB store.
"""

import hmac
import time
from typing import Any, Dict, FrozenSet, Mapping, Optional, Type, TypeVar

from pydantic import ValidationError

from shared.config import IdentityProviderConfig
from shared.errors import ConflictError, InvalidRequestError
from shared.logging import get_logger
from ..domain.models import (
    Application,
    AuthorizationCode,
    Client,
    Entity,
    RefreshToken,
    User,
    UserApplication,
    utc_now_iso,
)
from ..security.passwords import PasswordHasher
from .dynamodb import DynamoDBStore


CLIENT_MUTABLE_FIELDS: FrozenSet[str] = frozenset({"client_secret", "redirect_uris", "name", "description"})
APPLICATION_MUTABLE_FIELDS: FrozenSet[str] = frozenset({"client_id", "name", "description", "account"})
USER_APPLICATION_MUTABLE_FIELDS: FrozenSet[str] = frozenset({"account"})

EntityT = TypeVar("EntityT", bound=Entity)


class IdentityRepository:
    """Reads and writes identity provider entities."""

    def __init__(
        self,
        store: DynamoDBStore,
        config: IdentityProviderConfig,
        password_hasher: PasswordHasher
    ):
        self.store = store
        self.config = config
        self.password_hasher = password_hasher
        self.logger = get_logger("management.repository")

    @staticmethod
    def _build(model: Type[EntityT], data: Mapping[str, Any]) -> EntityT:
        """Construct an entity, reporting bad field values as an invalid request."""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            fields = sorted({str(error["loc"][0]) for error in e.errors() if error.get("loc")})
            raise InvalidRequestError(f"Invalid values for: {', '.join(fields)}") from e

    def _load(self, model: Type[EntityT], table: str, key: Mapping[str, Any]) -> Optional[EntityT]:
        item = self.store.get(table, key)
        return model.model_validate(item) if item else None

    def _overwrite(
        self,
        table: str,
        current: EntityT,
        changes: Mapping[str, Any],
        label: str
    ) -> EntityT:
        """Apply changes to current and write it back if nobody else has meanwhile."""
        data = current.to_item()
        data.update(changes)
        data["updated_at"] = utc_now_iso()
        updated = self._build(type(current), data)

        try:
            self.store.put(table, updated.to_item(), expected={"updated_at": current.updated_at})
        except ConflictError as e:
            raise ConflictError(f"{label} was modified concurrently. Retry the update") from e
        return updated

    # Users

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self._load(User, self.config.users_table, {"user_id": user_id})

    def get_user_by_username(self, username: str) -> Optional[User]:
        items = self.store.query(
            self.config.users_table,
            self.config.username_index,
            "username = :username",
            {":username": username}
        )
        return User.model_validate(items[0]) if items else None

    def create_user(self, username: str, password: str, email: str) -> User:
        """Create a user with a bcrypt password hash.

        Username uniqueness relies on the caller's index lookup; the index
        cannot be part of the write condition.
        """
        user = User(
            username=username,
            password_hash=self.password_hasher.hash_password(password),
            email=email
        )
        self.store.put(self.config.users_table, user.to_item(), if_absent=["user_id"])
        self.logger.info("User created", user_id=user.user_id, username=username)
        return user

    def verify_user_password(self, username: str, password: str) -> Optional[User]:
        user = self.get_user_by_username(username)
        if user is None:
            return None
        if not self.password_hasher.verify_password(password, user.password_hash):
            return None
        return user

    def update_user_password(self, user_id: str, new_password: str) -> Optional[User]:
        user = self.get_user_by_id(user_id)
        if user is None:
            return None

        updated = self._overwrite(
            self.config.users_table,
            user,
            {"password_hash": self.password_hasher.hash_password(new_password)},
            "User"
        )
        self.logger.info("User password updated", user_id=user_id)
        return updated

    # Clients

    def get_client_by_id(self, client_id: str) -> Optional[Client]:
        return self._load(Client, self.config.clients_table, {"client_id": client_id})

    def validate_client(
        self,
        client_id: str,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None
    ) -> Optional[Client]:
        """Return the client if the secret and redirect URI (when given) match."""
        client = self.get_client_by_id(client_id)
        if client is None:
            return None
        if client_secret and not hmac.compare_digest(
                client.client_secret.encode("utf-8"), client_secret.encode("utf-8")):
            return None
        if redirect_uri and redirect_uri not in client.redirect_uris:
            return None
        return client

    def create_client(
        self,
        client_id: str,
        client_secret: str,
        redirect_uris: list,
        name: str,
        description: str = ""
    ) -> Client:
        client = self._build(Client, dict(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uris=list(redirect_uris),
            name=name,
            description=description
        ))
        try:
            self.store.put(self.config.clients_table, client.to_item(), if_absent=["client_id"])
        except ConflictError as e:
            raise ConflictError("Client ID already exists") from e

        self.logger.info("Client created", client_id=client_id)
        return client

    def update_client(self, client_id: str, updates: Mapping[str, Any]) -> Client:
        client = self.get_client_by_id(client_id)
        if client is None:
            raise InvalidRequestError("Client not found")

        changes = {k: v for k, v in updates.items() if k in CLIENT_MUTABLE_FIELDS}
        updated = self._overwrite(self.config.clients_table, client, changes, "Client")
        self.logger.info("Client updated", client_id=client_id, fields=sorted(changes))
        return updated

    # Applications

    def get_application_by_id(self, application_id: str) -> Optional[Application]:
        return self._load(Application, self.config.applications_table, {"application_id": application_id})

    def create_application(
        self,
        application_id: Optional[str],
        client_id: str,
        name: str,
        description: str = "",
        account: str = ""
    ) -> Application:
        fields: Dict[str, Any] = {
            "client_id": client_id,
            "name": name,
            "description": description,
            "account": account,
        }
        if application_id:
            fields["application_id"] = application_id
        application = self._build(Application, fields)

        try:
            self.store.put(
                self.config.applications_table,
                application.to_item(),
                if_absent=["application_id"]
            )
        except ConflictError as e:
            raise ConflictError("Application ID already exists") from e

        self.logger.info(
            "Application created",
            application_id=application.application_id,
            client_id=client_id
        )
        return application

    def update_application(self, application_id: str, updates: Mapping[str, Any]) -> Application:
        application = self.get_application_by_id(application_id)
        if application is None:
            raise InvalidRequestError("Application not found")

        changes = {k: v for k, v in updates.items() if k in APPLICATION_MUTABLE_FIELDS}
        updated = self._overwrite(self.config.applications_table, application, changes, "Application")
        self.logger.info("Application updated", application_id=application_id, fields=sorted(changes))
        return updated

    # User-application mappings

    def get_user_application(self, user_id: str, application_id: str) -> Optional[UserApplication]:
        return self._load(
            UserApplication,
            self.config.user_applications_table,
            {"user_id": user_id, "application_id": application_id}
        )

    def create_user_application(self, user_id: str, application_id: str, account: str = "") -> UserApplication:
        mapping = self._build(UserApplication, {
            "user_id": user_id,
            "application_id": application_id,
            "account": account,
        })
        try:
            self.store.put(
                self.config.user_applications_table,
                mapping.to_item(),
                if_absent=["user_id", "application_id"]
            )
        except ConflictError as e:
            raise ConflictError(
                "User-application mapping already exists. Use updateUserApplication to modify it"
            ) from e

        self.logger.info("User-application mapping created", user_id=user_id, application_id=application_id)
        return mapping

    def update_user_application(
        self,
        user_id: str,
        application_id: str,
        updates: Mapping[str, Any]
    ) -> UserApplication:
        mapping = self.get_user_application(user_id, application_id)
        if mapping is None:
            raise InvalidRequestError("User-application mapping not found")

        changes = {k: v for k, v in updates.items() if k in USER_APPLICATION_MUTABLE_FIELDS}
        updated = self._overwrite(
            self.config.user_applications_table,
            mapping,
            changes,
            "User-application mapping"
        )
        self.logger.info("User-application mapping updated", user_id=user_id, application_id=application_id)
        return updated

    # Authorization codes

    def create_auth_code(
        self,
        user_id: str,
        client_id: str,
        redirect_uri: str,
        scope: str,
        code_challenge: Optional[str] = None,
        code_challenge_method: Optional[str] = None,
        application_id: Optional[str] = None,
        account: Optional[str] = None
    ) -> str:
        auth_code = AuthorizationCode(
            user_id=user_id,
            client_id=client_id,
            redirect_uri=redirect_uri,
            scope=scope,
            expires_at=int(time.time()) + self.config.auth_code_ttl_seconds,
            code_challenge=code_challenge,
            code_challenge_method=code_challenge_method,
            application_id=application_id,
            account=account
        )
        self.store.put(self.config.auth_codes_table, auth_code.to_item(), if_absent=["code"])
        return auth_code.code

    def get_auth_code(self, code: str) -> Optional[AuthorizationCode]:
        item = self.store.get(self.config.auth_codes_table, {"code": code})
        return AuthorizationCode.model_validate(item) if item else None

    def delete_auth_code(self, code: str) -> None:
        self.store.delete(self.config.auth_codes_table, {"code": code})

    # Refresh tokens

    def create_refresh_token(self, user_id: str, client_id: str, scope: str) -> str:
        token = RefreshToken(
            user_id=user_id,
            client_id=client_id,
            scope=scope,
            expires_at=int(time.time()) + self.config.refresh_token_ttl_seconds
        )
        self.store.put(self.config.refresh_tokens_table, token.to_item(), if_absent=["token_id"])
        return token.token_id

    def get_refresh_token(self, token_id: str) -> Optional[RefreshToken]:
        item = self.store.get(self.config.refresh_tokens_table, {"token_id": token_id})
        return RefreshToken.model_validate(item) if item else None

    def delete_refresh_token(self, token_id: str) -> None:
        self.store.delete(self.config.refresh_tokens_table, {"token_id": token_id})
