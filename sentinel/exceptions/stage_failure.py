"""Stage failure exception.

This module defines the StageFailure exception raised by a stage executor
when its external call or validation fails. The engine converts it into a
failed workflow that keeps the partial state produced so far.
"""

from typing import Any

from sentinel.exceptions.base import BaseWorkflowError


class StageFailure(BaseWorkflowError):
    """Raised when a pipeline stage cannot produce its output.

    Attributes:
        stage: Role of the stage that failed, if known
    """

    def __init__(
        self,
        message: str,
        stage: Any = None,
        context: dict | None = None
    ) -> None:
        super().__init__(message, context=context)
        self.stage = stage
