"""
Domain models for users, clients, applications, user-application mappings,
authorization codes, refresh tokens and signing key material.
"""

from .models import (
    Application,
    AuthorizationCode,
    Client,
    RefreshToken,
    SigningKeys,
    User,
    UserApplication,
    utc_now_iso,
)

__all__ = [
    "Application",
    "AuthorizationCode",
    "Client",
    "RefreshToken",
    "SigningKeys",
    "User",
    "UserApplication",
    "utc_now_iso",
]
