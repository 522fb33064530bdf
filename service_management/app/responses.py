"""
Response envelopes returned by every management function.
"""

import json
from typing import Any, Dict, Mapping, Optional

from shared.errors import ErrorResponse


DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}


def create_response(
    status_code: int,
    body: Mapping[str, Any],
    headers: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {**DEFAULT_HEADERS, **(headers or {})},
        "body": json.dumps(body, default=str),
    }


def create_error_response(error: str, description: str, status_code: int = 400) -> Dict[str, Any]:
    """Error envelope with an OAuth-style `{error, error_description}` body."""
    body = ErrorResponse(error=error, error_description=description)
    return create_response(status_code, body.model_dump())
