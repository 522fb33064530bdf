"""
DynamoDB persistence accessors.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from shared.errors import ConflictError
from shared.logging import get_logger


CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


class DynamoDBStore:
    """Thin wrapper over DynamoDB tables.

    Writes are full-item puts. Callers close the create/update race windows
    with `if_absent` (attribute names that must not exist yet) and
    `expected` (attribute values the stored item must still have).
    """

    def __init__(
        self,
        resource: Any = None,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None
    ):
        self._resource = resource
        self.region_name = region_name
        self.endpoint_url = endpoint_url
        self.logger = get_logger("management.persistence.dynamodb")

    @property
    def resource(self) -> Any:
        if self._resource is None:
            self._resource = boto3.resource(
                "dynamodb",
                region_name=self.region_name,
                endpoint_url=self.endpoint_url
            )
        return self._resource

    def _table(self, table_name: str) -> Any:
        return self.resource.Table(table_name)

    def get(self, table_name: str, key: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Fetch one item by primary key."""
        response = self._table(table_name).get_item(Key=dict(key))
        return response.get("Item")

    def put(
        self,
        table_name: str,
        item: Mapping[str, Any],
        *,
        if_absent: Optional[Iterable[str]] = None,
        expected: Optional[Mapping[str, Any]] = None
    ) -> None:
        """Write an item, optionally guarded by a condition."""
        condition = None
        for attribute in if_absent or ():
            clause = Attr(attribute).not_exists()
            condition = clause if condition is None else condition & clause
        for attribute, value in (expected or {}).items():
            clause = Attr(attribute).eq(value)
            condition = clause if condition is None else condition & clause

        kwargs: Dict[str, Any] = {"Item": dict(item)}
        if condition is not None:
            kwargs["ConditionExpression"] = condition

        try:
            self._table(table_name).put_item(**kwargs)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED:
                self.logger.warning("Conditional write rejected", table=table_name)
                raise ConflictError(
                    "Conditional write failed",
                    details={"table": table_name}
                ) from e
            raise

    def query(
        self,
        table_name: str,
        index_name: str,
        key_condition: str,
        values: Mapping[str, Any]
    ) -> List[Dict[str, Any]]:
        """Query a secondary index, e.g. `username = :username`."""
        response = self._table(table_name).query(
            IndexName=index_name,
            KeyConditionExpression=key_condition,
            ExpressionAttributeValues=dict(values)
        )
        return response.get("Items", [])

    def delete(self, table_name: str, key: Mapping[str, Any]) -> None:
        self._table(table_name).delete_item(Key=dict(key))
