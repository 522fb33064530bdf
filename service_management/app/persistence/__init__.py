"""
Persistence package.

- dynamodb: get/put/query/delete over DynamoDB tables, with conditional
  writes for creates (key must be absent) and updates (`updated_at` must be
  unchanged).
- parameters: SSM Parameter Store reads and writes for configuration and
  signing key material.
- repository: entity operations used by the management handlers and by the
  provider's authorization and token endpoints.
"""
