"""
Shared configuration management for the identity provider management functions.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IdentityProviderConfig(BaseSettings):
    """Settings read from the Lambda environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment name")
    log_level: str = Field(default="info", description="Root log level")
    service_name: str = Field(default="idp-management", description="Service name attached to log events")

    # DynamoDB tables
    users_table: str = Field(default="oidc-users")
    clients_table: str = Field(default="oidc-clients")
    auth_codes_table: str = Field(default="oidc-auth-codes")
    refresh_tokens_table: str = Field(default="oidc-refresh-tokens")
    applications_table: str = Field(default="oidc-applications")
    user_applications_table: str = Field(default="oidc-user-applications")
    username_index: str = Field(default="username-index")

    # SSM parameters
    issuer_url_param_name: str = Field(default="/oidc/issuer-url")
    jwt_keys_param_name: str = Field(default="/oidc/jwt-keys")
    config_cache_ttl_seconds: float = Field(default=300, ge=0)

    # Tokens and codes
    token_ttl_seconds: int = Field(default=3600, gt=0)
    auth_code_ttl_seconds: int = Field(default=600, gt=0)
    refresh_token_ttl_seconds: int = Field(default=30 * 24 * 60 * 60, gt=0)
    signing_key_max_bytes: int = Field(default=4096, gt=0)

    # Passwords
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)
    enforce_password_complexity: bool = Field(default=False)

    # AWS
    aws_region: Optional[str] = Field(default=None)
    dynamodb_endpoint_url: Optional[str] = Field(default=None)


_config: Optional[IdentityProviderConfig] = None


def get_config() -> IdentityProviderConfig:
    """Get the process-wide configuration instance."""
    global _config
    if _config is None:
        _config = IdentityProviderConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next call re-reads the environment."""
    global _config
    _config = None
