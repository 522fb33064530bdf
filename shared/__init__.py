"""
Shared utilities for the identity provider management functions.

This package aggregates common building blocks consumed by every function:

- config: Function configuration via pydantic-settings
- logging: Structured logging with request correlation
- errors: Canonical error types and responses
- cache: Process-local TTL cache for configuration values
- test_helpers: In-memory store fakes and event factories for tests

Any cross-function logic should live here to avoid import cycles. Do not
import from service_* packages into shared/.
"""
