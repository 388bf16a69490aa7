"""
Errors raised by the services.

Each error carries a stable machine-readable code so clients can tell
"too late to edit" apart from "forbidden" without parsing messages.
"""
from typing import Any, Dict, Optional


class TaskboardError(Exception):
    """Base class for every error the services raise on purpose."""
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(TaskboardError):
    """The record does not exist, or does not exist for this caller."""
    code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            f"{resource} {resource_id} not found",
            details={"resource": resource, "id": resource_id},
        )


class AuthorizationError(TaskboardError):
    """The caller may see the record but is not allowed to change it."""
    code = "AUTHORIZATION_FAILED"

    def __init__(self, resource: str, action: str):
        super().__init__(
            "Not authorized to perform this action",
            details={"resource": resource, "action": action},
        )


class EditWindowExpiredError(TaskboardError):
    """
    The mutability guard refused the change because the edit window has closed.

    Raised for an actor who is otherwise allowed to make the change.
    """
    code = "EDIT_TIME_EXPIRED"

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            "Edit time limit has expired",
            details={"resource": resource, "id": resource_id},
        )


class DuplicateResourceError(TaskboardError):
    code = "DUPLICATE_RESOURCE"

    def __init__(self, resource: str, field: str):
        super().__init__(
            "Resource already exists",
            details={"resource": resource, "field": field},
        )


class PersistenceFailure(TaskboardError):
    """The store rejected a write. The enclosing transaction has been rolled back."""
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message)
