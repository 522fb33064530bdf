"""
Field validation for management requests.

Every check raises InvalidRequestError with the description returned to the
caller.
"""

import re
from typing import Any, Iterable, List, Mapping
from urllib.parse import urlparse

from shared.errors import InvalidRequestError


_USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{3,50}$")
_IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{3,100}$")
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_PASSWORD_LENGTH = 8
ALLOWED_REDIRECT_SCHEMES = ("http", "https")


def _human_join(names: List[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return f"{', '.join(names[:-1])}, and {names[-1]}"


def is_blank(value: Any) -> bool:
    """None, empty string, zero and False count as not provided. Empty lists do not."""
    return value is None or isinstance(value, (str, bool, int, float)) and not value


def require_fields(event: Mapping[str, Any], fields: Iterable[str]) -> None:
    """Fail unless every field is provided."""
    fields = list(fields)
    if not any(is_blank(event.get(field)) for field in fields):
        return

    if len(fields) == 1:
        raise InvalidRequestError(f"Missing required parameter: {fields[0]}")
    raise InvalidRequestError(
        f"Missing required parameters: {_human_join(fields)} are required"
    )


def validate_username(username: Any) -> None:
    if not isinstance(username, str) or not _USERNAME_PATTERN.match(username):
        raise InvalidRequestError(
            "Invalid username format. Username must be 3-50 characters and contain only "
            "letters, numbers, dashes, and underscores"
        )


def validate_identifier(value: Any, field: str) -> None:
    """client_id and application_id: 3-100 letters, digits, dashes, underscores."""
    if not isinstance(value, str) or not _IDENTIFIER_PATTERN.match(value):
        raise InvalidRequestError(
            f"Invalid {field} format. Must be 3-100 characters and contain only "
            "letters, numbers, dashes, and underscores"
        )


def validate_email(email: Any) -> None:
    if not isinstance(email, str) or not _EMAIL_PATTERN.match(email):
        raise InvalidRequestError("Invalid email format")


def validate_password(password: Any, enforce_complexity: bool = False) -> None:
    """Minimum length always; character classes only when enforce_complexity is set."""
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidRequestError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if not enforce_complexity:
        return

    if not (any(c.isupper() for c in password)
            and any(c.islower() for c in password)
            and any(c.isdigit() for c in password)
            and any(not c.isalnum() for c in password)):
        raise InvalidRequestError(
            "Password must contain at least one uppercase letter, one lowercase letter, "
            "one number, and one special character"
        )


def validate_redirect_uris(redirect_uris: Any) -> None:
    if not isinstance(redirect_uris, list) or not redirect_uris:
        raise InvalidRequestError("redirect_uris must be a non-empty array of URLs")

    for uri in redirect_uris:
        try:
            parsed = urlparse(uri) if isinstance(uri, str) else None
        except ValueError:
            parsed = None

        if parsed is None or not parsed.scheme:
            raise InvalidRequestError(f"Invalid redirect URI format: {uri}")
        if parsed.scheme.lower() not in ALLOWED_REDIRECT_SCHEMES:
            raise InvalidRequestError(f"Invalid redirect URI protocol: {uri}. Must use http or https")
        if not parsed.netloc:
            raise InvalidRequestError(f"Invalid redirect URI format: {uri}")


def collect_updates(
    event: Mapping[str, Any],
    key_fields: Iterable[str],
    mutable_fields: Iterable[str]
) -> dict:
    """Split the update fields out of an update event.

    Everything except `operation` and the key fields is treated as an
    update; fields outside mutable_fields are rejected.
    """
    excluded = {"operation", *key_fields}
    updates = {k: v for k, v in event.items() if k not in excluded}

    if not updates:
        raise InvalidRequestError("No update parameters provided")

    unknown = sorted(set(updates) - set(mutable_fields))
    if unknown:
        raise InvalidRequestError(f"Unknown update parameters: {', '.join(unknown)}")

    return updates
