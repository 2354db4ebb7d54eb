"""Workflow error exception.

This module defines the WorkflowError exception raised for general
orchestration failures: invalid state transitions, LLM calls that fail
after retries, or operations requested on a workflow in the wrong state.
"""

from sentinel.exceptions.base import BaseWorkflowError


class WorkflowError(BaseWorkflowError):
    """Raised when workflow execution fails.

    Use this for workflow-level errors that don't fit into more specific
    exception categories, such as running a workflow twice or cancelling
    one that is not running.
    """

    pass
