"""
Management functions for the OIDC identity provider.

Directly invoked Lambda functions that create and update users, OAuth
clients, applications and user-application mappings, plus the credential
helpers (issuer URL, signing keys, tokens, passwords) shared with the
provider's authorization and token endpoints.

- app.main: Lambda entry points and dependency wiring.
- app.handlers: One handler per entity, dispatching on `operation`.
- app.persistence: DynamoDB and SSM accessors and the entity repository.
- app.security: Issuer URL cache, signing keys, JWTs, bcrypt.
- app.validation: Field validation rules.
- app.domain: Entity models.

Design notes:
- Module import must not perform AWS calls; clients are created lazily.
- Use the shared/ utilities for configuration, logging and errors.
"""
