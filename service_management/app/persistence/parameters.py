"""
SSM Parameter Store accessors.

AWS errors are not translated here: callers map `ParameterNotFound`,
`AccessDeniedException` and `ParameterAlreadyExists` to their own failure
kinds via `error_code()`.
"""

from dataclasses import dataclass
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError

from shared.logging import get_logger


PARAMETER_NOT_FOUND = "ParameterNotFound"
PARAMETER_ALREADY_EXISTS = "ParameterAlreadyExists"
ACCESS_DENIED = "AccessDeniedException"


def error_code(error: ClientError) -> str:
    """AWS error code carried by a botocore ClientError."""
    return error.response.get("Error", {}).get("Code", "")


@dataclass
class Parameter:
    """A parameter value and its version."""
    name: str
    value: str
    version: int


class ParameterStore:
    """Reads and writes SSM parameters."""

    def __init__(self, client: Any = None, region_name: Optional[str] = None):
        self._client = client
        self.region_name = region_name
        self.logger = get_logger("management.persistence.ssm")

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("ssm", region_name=self.region_name)
        return self._client

    def get_parameter(self, name: str, decrypt: bool = False, version: Optional[int] = None) -> Parameter:
        """Read the current value, or a specific version via the `name:version` selector."""
        selector = f"{name}:{version}" if version is not None else name
        response = self.client.get_parameter(Name=selector, WithDecryption=decrypt)
        parameter = response["Parameter"]
        return Parameter(
            name=parameter.get("Name", name),
            value=parameter["Value"],
            version=int(parameter.get("Version", 0))
        )

    def put_parameter(
        self,
        name: str,
        value: str,
        secure: bool = False,
        overwrite: bool = True
    ) -> int:
        """Write a parameter and return its new version."""
        response = self.client.put_parameter(
            Name=name,
            Value=value,
            Type="SecureString" if secure else "String",
            Overwrite=overwrite
        )
        version = int(response.get("Version", 0))
        self.logger.info("Parameter written", name=name, version=version)
        return version
