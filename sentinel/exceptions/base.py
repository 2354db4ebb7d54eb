"""Base exception class for all workflow errors.

This module defines the BaseWorkflowError class that serves as the base
for all custom exceptions in the system. All workflow-specific exceptions
inherit from this class so callers can catch every engine error with a
single exception type.
"""


class BaseWorkflowError(Exception):
    """Base exception for all workflow errors.

    Attributes:
        message: Error message describing what went wrong
        context: Optional dictionary with additional error context
    """

    def __init__(
        self,
        message: str,
        context: dict | None = None
    ) -> None:
        """Initialize base workflow error.

        Args:
            message: Human-readable error message
            context: Optional dictionary with additional error context
                (e.g., workflow id, stage, input parameters)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        context_str = f", context={self.context}" if self.context else ""
        return f"{self.__class__.__name__}({self.message!r}{context_str})"
