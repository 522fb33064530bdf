"""
JWT issuance and verification with the provider's RS256 signing key.
"""

import time
from typing import Any, Dict, Mapping, Optional

import jwt

from shared.errors import TokenInvalidError
from shared.logging import get_logger
from .issuer import IssuerUrlProvider
from .keys import ALGORITHM, SigningKeyManager


DEFAULT_TOKEN_TTL = 3600


class TokenService:
    """Signs and verifies tokens carrying the issuer URL and key id."""

    def __init__(
        self,
        key_manager: SigningKeyManager,
        issuer_provider: IssuerUrlProvider,
        default_ttl: int = DEFAULT_TOKEN_TTL
    ):
        self.key_manager = key_manager
        self.issuer_provider = issuer_provider
        self.default_ttl = default_ttl
        self.logger = get_logger("management.security.tokens")

    def create_token(self, claims: Mapping[str, Any], ttl: Optional[int] = None) -> str:
        """Sign claims, adding `iss`, `iat` and `exp`. The header carries `kid`."""
        keys = self.key_manager.get_signing_keys()
        issuer = self.issuer_provider.get_issuer_url()

        now = int(time.time())
        payload = dict(claims)
        payload.update({
            "iss": issuer,
            "iat": now,
            "exp": now + (ttl if ttl is not None else self.default_ttl),
        })

        return jwt.encode(
            payload,
            keys.private_key,
            algorithm=ALGORITHM,
            headers={"kid": keys.key_id}
        )

    def verify_token(self, token: str) -> Dict[str, Any]:
        """Verify signature, algorithm, expiry and issuer, returning the claims."""
        keys = self.key_manager.get_signing_keys()
        issuer = self.issuer_provider.get_issuer_url()

        try:
            return jwt.decode(
                token,
                keys.public_key,
                algorithms=[ALGORITHM],
                issuer=issuer,
                options={"verify_aud": False, "require": ["exp", "iss"]}
            )
        except jwt.PyJWTError as e:
            self.logger.warning("Token verification failed", error=str(e))
            raise TokenInvalidError(f"Invalid token: {e}") from e
