"""
Shared error handling for the identity provider management functions.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard OAuth-style error body."""

    error: str
    error_description: str


class IdentityProviderException(Exception):
    """Base exception for identity provider functions."""

    status_code: int = 500

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(error=self.code, error_description=self.message)


class InvalidRequestError(IdentityProviderException):
    """Client-caused errors: missing or malformed fields, unknown references, duplicates."""

    status_code = 400

    def __init__(self, message: str = "Invalid request", details: Optional[Dict[str, Any]] = None):
        super().__init__("invalid_request", message, details)


class ConflictError(InvalidRequestError):
    """A conditional write was rejected because the stored item changed or already exists."""

    def __init__(self, message: str = "Conditional write failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ServerError(IdentityProviderException):
    """Unexpected failures surfaced to the caller as server_error."""

    def __init__(self, message: str = "Internal server error", details: Optional[Dict[str, Any]] = None):
        super().__init__("server_error", message, details)


class ConfigurationError(ServerError):
    """Configuration values are missing or cannot be read from the parameter store."""


class KeyStorageError(ServerError):
    """Signing key material cannot be stored."""


class TokenInvalidError(IdentityProviderException):
    """Token failed signature, issuer, algorithm or expiry checks."""

    status_code = 401

    def __init__(self, message: str = "Invalid token", details: Optional[Dict[str, Any]] = None):
        super().__init__("invalid_token", message, details)
