"""
Password hashing with bcrypt.
"""

import bcrypt

from shared.logging import get_logger


DEFAULT_ROUNDS = 10
# bcrypt only uses the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


class PasswordHasher:
    """Salted one-way password hashing with a fixed work factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds
        self.logger = get_logger("management.security.passwords")

    def hash_password(self, password: str) -> str:
        """Hash a plaintext password. The salt is embedded in the result."""
        hashed = bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored bcrypt hash."""
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except ValueError:
            self.logger.warning("Stored password hash is not a valid bcrypt hash")
            return False
