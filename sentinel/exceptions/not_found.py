"""Not found exception raised for unknown workflow identifiers."""

from sentinel.exceptions.base import BaseWorkflowError


class NotFoundError(BaseWorkflowError):
    """Raised when a workflow id is neither running nor in history."""

    pass
