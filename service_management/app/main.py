"""
Lambda entry points for the management functions.

Each deployed function points at one of `user_management`,
`client_management`, `application_management` or
`user_application_management`. Dependencies are built on the first
invocation and reused while the execution environment stays warm; importing
this module performs no AWS calls.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from shared.cache import TTLCache
from shared.config import IdentityProviderConfig, get_config
from shared.logging import configure_logging
from .handlers.applications import ApplicationManagementHandler
from .handlers.clients import ClientManagementHandler
from .handlers.user_applications import UserApplicationManagementHandler
from .handlers.users import UserManagementHandler
from .persistence.dynamodb import DynamoDBStore
from .persistence.parameters import ParameterStore
from .persistence.repository import IdentityRepository
from .security.issuer import IssuerUrlProvider
from .security.keys import SigningKeyManager
from .security.passwords import PasswordHasher
from .security.tokens import TokenService


@dataclass
class ManagementServices:
    """Everything one execution environment needs, wired once."""
    config: IdentityProviderConfig
    repository: IdentityRepository
    token_service: TokenService
    users: UserManagementHandler
    clients: ClientManagementHandler
    applications: ApplicationManagementHandler
    user_applications: UserApplicationManagementHandler


def create_services(
    config: Optional[IdentityProviderConfig] = None,
    store: Optional[DynamoDBStore] = None,
    parameter_store: Optional[ParameterStore] = None
) -> ManagementServices:
    """Wire handlers and helpers. Tests pass in-memory stores."""
    config = config or get_config()
    configure_logging(config.service_name, config.log_level)

    store = store or DynamoDBStore(region_name=config.aws_region, endpoint_url=config.dynamodb_endpoint_url)
    parameter_store = parameter_store or ParameterStore(region_name=config.aws_region)

    repository = IdentityRepository(store, config, PasswordHasher(config.bcrypt_rounds))
    token_service = TokenService(
        SigningKeyManager(parameter_store, config),
        IssuerUrlProvider(parameter_store, config, TTLCache(config.config_cache_ttl_seconds)),
        default_ttl=config.token_ttl_seconds
    )

    return ManagementServices(
        config=config,
        repository=repository,
        token_service=token_service,
        users=UserManagementHandler(repository, config),
        clients=ClientManagementHandler(repository, config),
        applications=ApplicationManagementHandler(repository, config),
        user_applications=UserApplicationManagementHandler(repository, config),
    )


_services: Optional[ManagementServices] = None


def get_services() -> ManagementServices:
    global _services
    if _services is None:
        _services = create_services()
    return _services


def set_services(services: Optional[ManagementServices]) -> None:
    """Replace the process-wide services (None resets them)."""
    global _services
    _services = services


def user_management(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    return get_services().users(event, context)


def client_management(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    return get_services().clients(event, context)


def application_management(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    return get_services().applications(event, context)


def user_application_management(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    return get_services().user_applications(event, context)
