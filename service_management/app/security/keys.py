"""
RS256 signing key retrieval and first-use generation.

Key material lives in a single SecureString parameter as JSON:
`{"private_key": ..., "public_key": ..., "kid": ..., "alg": "RS256"}`.
Infrastructure may provision the parameter with an empty placeholder; the
first caller that finds no usable key generates one and stores it.

Concurrent first use converges on one key: a missing parameter is created
with `Overwrite=False`, and a placeholder is won by the first write after
the placeholder version. A process reading the current value while a losing
write is in place, before the loser restores the winner, can still pick up
the losing key.
"""

import json
import uuid
from typing import Any, Dict, Optional

from botocore.exceptions import ClientError
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm
from pydantic import ValidationError

from shared.config import IdentityProviderConfig
from shared.errors import KeyStorageError
from shared.logging import get_logger
from ..domain.models import SigningKeys
from ..persistence.parameters import (
    PARAMETER_ALREADY_EXISTS,
    PARAMETER_NOT_FOUND,
    Parameter,
    ParameterStore,
    error_code,
)


ALGORITHM = "RS256"
KEY_SIZE = 2048
REQUIRED_FIELDS = ("private_key", "public_key", "kid")


def generate_signing_keys() -> SigningKeys:
    """Generate a new RSA key pair with a fresh key id."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=KEY_SIZE)

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )

    return SigningKeys(
        private_key=private_pem.decode("ascii"),
        public_key=public_pem.decode("ascii"),
        key_id=str(uuid.uuid4()),
        algorithm=ALGORITHM
    )


class SigningKeyManager:
    """Returns the stored signing key, generating and storing one on first use."""

    def __init__(self, parameter_store: ParameterStore, config: IdentityProviderConfig):
        self.parameter_store = parameter_store
        self.parameter_name = config.jwt_keys_param_name
        self.max_bytes = config.signing_key_max_bytes
        self.logger = get_logger("management.security.keys")

    def get_signing_keys(self) -> SigningKeys:
        parameter = self._read()
        keys = self._parse(parameter)
        if keys is not None:
            return keys

        self.logger.info("Generating new RSA key pair", parameter=self.parameter_name)
        keys = generate_signing_keys()
        payload = keys.to_json()

        size = len(payload.encode("utf-8"))
        if size > self.max_bytes:
            raise KeyStorageError(
                f"JWT keys too large for SSM parameter: {size} bytes (max {self.max_bytes})"
            )

        if parameter is None:
            return self._create(keys, payload)
        return self._replace_placeholder(parameter, keys, payload)

    def public_jwk(self) -> Dict[str, Any]:
        """Public signing key as a JWK with `kid`, `alg` and `use`."""
        keys = self.get_signing_keys()
        public_key = serialization.load_pem_public_key(keys.public_key.encode("ascii"))
        jwk = json.loads(RSAAlgorithm.to_jwk(public_key))
        jwk.update({"kid": keys.key_id, "alg": keys.algorithm, "use": "sig"})
        return jwk

    def jwks(self) -> Dict[str, Any]:
        """JWK set for the discovery endpoint."""
        return {"keys": [self.public_jwk()]}

    def _read(self, version: Optional[int] = None) -> Optional[Parameter]:
        try:
            return self.parameter_store.get_parameter(self.parameter_name, decrypt=True, version=version)
        except ClientError as e:
            if error_code(e) == PARAMETER_NOT_FOUND:
                return None
            self.logger.error("Error getting signing keys", error=str(e))
            raise

    def _parse(self, parameter: Optional[Parameter]) -> Optional[SigningKeys]:
        if parameter is None:
            return None

        try:
            data = json.loads(parameter.value)
        except ValueError:
            self.logger.warning("Signing key parameter is not JSON", parameter=self.parameter_name)
            return None

        if not isinstance(data, dict):
            self.logger.warning("Signing key parameter is not a JSON object", parameter=self.parameter_name)
            return None

        missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
        if len(missing) == len(REQUIRED_FIELDS):
            self.logger.info("Signing key parameter holds a placeholder", parameter=self.parameter_name)
            return None
        if missing:
            self.logger.warning(
                "Signing key parameter is missing fields",
                parameter=self.parameter_name,
                missing=missing
            )
            return None

        try:
            return SigningKeys.model_validate(data)
        except ValidationError:
            self.logger.warning("Signing key parameter is incomplete", parameter=self.parameter_name)
            return None

    def _create(self, keys: SigningKeys, payload: str) -> SigningKeys:
        """Store keys only if no parameter exists yet; adopt the winner otherwise."""
        try:
            self.parameter_store.put_parameter(self.parameter_name, payload, secure=True, overwrite=False)
        except ClientError as e:
            if error_code(e) != PARAMETER_ALREADY_EXISTS:
                raise
            self.logger.info("Signing key created concurrently, using stored key")
            return self._reread()

        self.logger.info("Signing key stored", kid=keys.key_id)
        return keys

    def _replace_placeholder(self, parameter: Parameter, keys: SigningKeys, payload: str) -> SigningKeys:
        """Overwrite a placeholder. The first write after the read version wins.

        A process whose write landed later adopts the winning version and
        writes it back so the current value is the winner again.
        """
        winning_version = parameter.version + 1
        version = self.parameter_store.put_parameter(self.parameter_name, payload, secure=True, overwrite=True)
        if version == winning_version:
            self.logger.info("Signing key stored", kid=keys.key_id, version=version)
            return keys

        winner = self._parse(self._read(version=winning_version))
        if winner is None:
            raise KeyStorageError(
                f"Signing key parameter version {winning_version} was written concurrently but holds no usable key"
            )

        self.parameter_store.put_parameter(self.parameter_name, winner.to_json(), secure=True, overwrite=True)
        self.logger.info(
            "Signing key replaced concurrently, restored first writer",
            kid=winner.key_id,
            version=winning_version,
            discarded_version=version
        )
        return winner

    def _reread(self) -> SigningKeys:
        keys = self._parse(self._read())
        if keys is None:
            raise KeyStorageError("Signing key parameter was written concurrently but holds no usable key")
        return keys
