"""Base node utilities for consistent stage error handling.

The stage_error_handler decorator guarantees that no stage exception
crosses the engine boundary: failures are logged, written to the EventLog
through the stage context and turned into a failed state that keeps all
output produced by earlier stages.
"""

import logging
from functools import wraps
from typing import Callable

from sentinel.agents.context import StageContext
from sentinel.exceptions.base import BaseWorkflowError
from sentinel.graph.state import AgentRole, AgentState, WorkflowStatus
from sentinel.graph.state_utils import update_state

logger = logging.getLogger(__name__)

StageFunction = Callable[[AgentState, StageContext], AgentState]


def stage_error_handler(role: AgentRole) -> Callable[[StageFunction], StageFunction]:
    """Decorator for consistent stage error handling.

    Args:
        role: Stage wrapped by the decorated function

    Returns:
        Decorator function that wraps the stage function

    Example:
        ```python
        @stage_error_handler(AgentRole.HUNTER)
        def run_hunter(state: AgentState, context: StageContext) -> AgentState:
            return executor.execute(state, context)
        ```
    """
    def decorator(func: StageFunction) -> StageFunction:

        @wraps(func)
        def wrapper(state: AgentState, context: StageContext) -> AgentState:
            try:
                return func(state, context)

            except BaseWorkflowError as e:
                logger.error(
                    f"Stage {role.value} failed for workflow {state.get('workflow_id')}: {e}",
                    exc_info=True
                )
                error_message = _format_error_message(role, str(e))

            except Exception as e:
                logger.error(
                    f"Unexpected error in stage {role.value} for workflow {state.get('workflow_id')}: {e}",
                    exc_info=True
                )
                error_message = _format_error_message(
                    role,
                    str(e),
                    error_type=type(e).__name__
                )

            context.log(error_message)
            return update_state(
                state,
                status=WorkflowStatus.FAILED,
                current_agent=role,
                error=error_message,
            )

        return wrapper

    return decorator


def _format_error_message(
    role: AgentRole,
    error_message: str,
    error_type: str | None = None
) -> str:
    """Format a stage error message.

    Args:
        role: Stage where the error occurred
        error_message: Original error message
        error_type: Exception class name for unexpected errors

    Returns:
        Formatted message, e.g. "HUNTER failed: No sources discovered for Acme"
    """
    if error_type is None:
        return f"{role.value} failed: {error_message}"
    return f"{role.value} failed: Unexpected error ({error_type}) - {error_message}"
