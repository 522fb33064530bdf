"""
Issuer URL lookup backed by SSM and a process-local TTL cache.
"""

from botocore.exceptions import BotoCoreError, ClientError

from shared.cache import TTLCache
from shared.config import IdentityProviderConfig
from shared.errors import ConfigurationError
from shared.logging import get_logger
from ..persistence.parameters import ACCESS_DENIED, PARAMETER_NOT_FOUND, ParameterStore, error_code


class IssuerUrlProvider:
    """Resolves the OIDC issuer URL embedded in and checked against tokens."""

    def __init__(self, parameter_store: ParameterStore, config: IdentityProviderConfig, cache: TTLCache):
        self.parameter_store = parameter_store
        self.parameter_name = config.issuer_url_param_name
        self.cache = cache
        self.logger = get_logger("management.security.issuer")

    def get_issuer_url(self) -> str:
        """Return the cached issuer URL, refetching it once the TTL has elapsed."""
        return self.cache.get_or_load(self.parameter_name, self._fetch)

    def _fetch(self) -> str:
        try:
            return self.parameter_store.get_parameter(self.parameter_name).value
        except ClientError as e:
            code = error_code(e)
            if code == PARAMETER_NOT_FOUND:
                self.logger.error("SSM parameter not found", parameter=self.parameter_name)
                raise ConfigurationError("OIDC issuer URL parameter not found in SSM") from e
            if code == ACCESS_DENIED:
                self.logger.error("Access denied to SSM parameter", parameter=self.parameter_name)
                raise ConfigurationError("Access denied to OIDC issuer URL parameter") from e

            self.logger.error("Error getting issuer URL from SSM", code=code, error=str(e))
            raise ConfigurationError(f"Failed to retrieve OIDC issuer URL: {e}") from e
        except BotoCoreError as e:
            self.logger.error("Error getting issuer URL from SSM", error=str(e))
            raise ConfigurationError(f"Failed to retrieve OIDC issuer URL: {e}") from e
