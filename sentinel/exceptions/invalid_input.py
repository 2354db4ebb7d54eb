"""Invalid input exception.

Raised when a workflow start request is malformed. The request is rejected
before any workflow state is created.
"""

from sentinel.exceptions.base import BaseWorkflowError


class InvalidInputError(BaseWorkflowError):
    """Raised when a start request is malformed (e.g., empty target company)."""

    pass
