"""
Credential and token helpers.

- issuer: issuer URL lookup with a process-local TTL cache.
- keys: RS256 signing key retrieval and first-use generation.
- tokens: JWT issuance and verification.
- passwords: bcrypt hashing and verification.

The management handlers only use password hashing; the rest is consumed by
the provider's authorization and token endpoints.
"""
