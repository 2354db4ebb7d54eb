"""Base stage executor for all pipeline stages.

Executors follow the Agent Pattern with dependency injection: the LLM and
tools are passed in, state flows in and out of ``execute``, and nothing is
stored between runs.
"""

import logging
from abc import ABC, abstractmethod
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from langchain_core.language_models import BaseChatModel

from sentinel.agents.context import StageContext
from sentinel.exceptions.stage_failure import StageFailure
from sentinel.exceptions.workflow_error import WorkflowError
from sentinel.graph.state import AgentRole, AgentState
from sentinel.utils.rate_limiter import invoke_llm_with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")


def agent_error_handler(role: AgentRole, operation_name: str) -> Callable:
    """Decorator converting LLM-call failures into StageFailure.

    StageFailure raised inside the method passes through unchanged; any
    other exception (including WorkflowError from the rate limiter) is
    wrapped with an operation-specific message.

    Args:
        role: Stage the method belongs to
        operation_name: Name of the operation, used in the message
            "Failed to generate {operation_name} from LLM"

    Example:
        ```python
        @agent_error_handler(AgentRole.ANALYST, "SWOT analysis")
        def _generate_swot(self, content: str) -> dict[str, Any]:
            ...
        ```
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except StageFailure:
                raise
            except WorkflowError as e:
                raise StageFailure(
                    f"Failed to generate {operation_name} from LLM",
                    stage=role.value,
                    context={
                        **e.context,
                        "operation": operation_name,
                        "original_error": str(e),
                    },
                ) from e
            except Exception as e:
                logger.error(
                    f"Unexpected error in {role.value}.{func.__name__}: {e}",
                    exc_info=True
                )
                raise StageFailure(
                    f"Failed to generate {operation_name} from LLM",
                    stage=role.value,
                    context={
                        "error": str(e),
                        "error_type": type(e).__name__,
                        "operation": func.__name__,
                    },
                ) from e

        return wrapper

    return decorator


class StageExecutor(ABC):
    """Base class for all pipeline stage executors.

    Concrete executors must:
    1. Inherit from StageExecutor
    2. Implement ``execute(state, context)``
    3. Implement the ``role`` property

    Executors that call an LLM set ``requires_llm = True`` and receive a
    BaseChatModel; tool-only executors receive their tools instead.

    Attributes:
        llm: Language model instance (injected), or None
        config: Executor-specific settings overriding global Config values
    """

    requires_llm: bool = False

    def __init__(
        self,
        llm: Optional[BaseChatModel] = None,
        config: Optional[dict[str, Any]] = None,
    ) -> None:
        """Initialize executor with dependencies.

        Args:
            llm: Language model instance. Required when ``requires_llm``.
            config: Optional executor-specific settings

        Raises:
            TypeError: If an LLM is required and llm is not a BaseChatModel
            ValueError: If config is not a dictionary
        """
        if self.requires_llm and not isinstance(llm, BaseChatModel):
            raise TypeError(
                f"llm must be a BaseChatModel instance, got {type(llm).__name__}"
            )
        if config is not None and not isinstance(config, dict):
            raise ValueError(
                f"config must be a dictionary, got {type(config).__name__}"
            )

        self.llm = llm
        self.config = config or {}

    def invoke_llm(
        self,
        messages: list[Any],
        context: Optional[StageContext] = None,
        **kwargs: Any
    ) -> Any:
        """Invoke the LLM with retry logic and report its token usage.

        Args:
            messages: List of messages to send to the LLM
            context: Stage context receiving the usage and supplying the
                retry settings, if any
            **kwargs: Additional keyword arguments passed to llm.invoke()

        Returns:
            Response from the LLM

        Raises:
            WorkflowError: If all retries are exhausted
        """
        settings = context.settings if context is not None else None
        response = invoke_llm_with_retry(
            self.llm, messages, label=self.name, settings=settings, **kwargs
        )
        if context is not None:
            context.record_usage(response)
        return response

    @staticmethod
    def response_text(response: Any) -> str:
        """Return the text content of an LLM response."""
        content = response.content if hasattr(response, "content") else response
        if isinstance(content, list):
            # Multi-part content blocks
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        return str(content or "").strip()

    @abstractmethod
    def execute(self, state: AgentState, context: StageContext) -> AgentState:
        """Execute the stage.

        Implementations return a new state with only their owned field
        changed. The input state is never mutated.

        Args:
            state: Current run state
            context: Handle for log entries and usage reporting

        Returns:
            Updated AgentState

        Raises:
            StageFailure: If the stage cannot produce its output
        """
        pass

    @property
    @abstractmethod
    def role(self) -> AgentRole:
        """Return the pipeline stage this executor implements."""
        pass

    @property
    def name(self) -> str:
        """Return executor name, e.g. "analyst_agent"."""
        return f"{self.role.value.lower()}_agent"

    def fail(self, message: str, **context: Any) -> StageFailure:
        """Build a StageFailure attributed to this stage."""
        return StageFailure(message, stage=self.role.value, context=context or None)
