"""
Base class for the management functions.
"""

from typing import Any, Callable, Dict, Mapping, Optional

from shared.config import IdentityProviderConfig
from shared.errors import InvalidRequestError
from shared.logging import clear_context, get_logger, redact, set_operation, set_request_id
from ..persistence.repository import IdentityRepository
from ..responses import create_error_response, create_response


Operation = Callable[[Mapping[str, Any]], Dict[str, Any]]


class ManagementHandler:
    """Dispatches an invocation event on its `operation` field.

    Subclasses register their operations in `_register_operations`. Operation
    methods raise InvalidRequestError for client errors; anything else
    becomes a server_error envelope.
    """

    name = "management"

    def __init__(self, repository: IdentityRepository, config: IdentityProviderConfig):
        self.repository = repository
        self.config = config
        self.logger = get_logger(f"management.handlers.{self.name}")
        self.operations: Dict[str, Operation] = self._register_operations()

    def _register_operations(self) -> Dict[str, Operation]:
        raise NotImplementedError

    @property
    def valid_operations(self) -> str:
        return ", ".join(self.operations)

    def __call__(self, event: Any, context: Optional[Any] = None) -> Dict[str, Any]:
        set_request_id(getattr(context, "aws_request_id", None))
        try:
            if not isinstance(event, Mapping):
                event = {}
            self.logger.info("Management operation requested", handler=self.name, event=redact(event))

            operation = event.get("operation")
            if not operation:
                return create_error_response(
                    "invalid_request",
                    f"Missing operation parameter. Valid operations: {self.valid_operations}"
                )

            handler = self.operations.get(operation) if isinstance(operation, str) else None
            if handler is None:
                return create_error_response(
                    "invalid_request",
                    f"Unknown operation: {operation}. Valid operations: {self.valid_operations}"
                )

            set_operation(operation)
            return handler(event)

        except InvalidRequestError as e:
            self.logger.info("Request rejected", error=e.message)
            return create_error_response(e.code, e.message, e.status_code)
        except Exception as e:
            self.logger.error("Error in management handler", handler=self.name, error=str(e), exc_info=True)
            return create_error_response("server_error", f"Internal server error: {e}", 500)
        finally:
            clear_context()

    @staticmethod
    def success(message: str, **entities: Any) -> Dict[str, Any]:
        return create_response(200, {"message": message, **entities})
