"""Social post agent: derives a short post from a finished report."""

import logging
from typing import Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from sentinel.agents.base_agent import StageExecutor
from sentinel.agents.context import StageContext
from sentinel.agents.prompts.social_prompts import SYSTEM_PROMPT, build_user_prompt
from sentinel.exceptions.workflow_error import WorkflowError
from sentinel.graph.state import AgentState
from sentinel.utils.rate_limiter import invoke_llm_with_retry

logger = logging.getLogger(__name__)

MAX_POST_LENGTH = 3000


class SocialPostAgent:
    """Generates a social media post summarizing a completed report.

    Runs after the pipeline, so it is not a StageExecutor; the engine
    serializes calls per workflow.
    """

    def __init__(self, llm: BaseChatModel) -> None:
        if not isinstance(llm, BaseChatModel):
            raise TypeError(
                f"llm must be a BaseChatModel instance, got {type(llm).__name__}"
            )
        self.llm = llm

    def generate(self, state: AgentState, context: Optional[StageContext] = None) -> str:
        """Generate the post text.

        Args:
            state: Completed run state with a final report
            context: Optional context receiving log entries and usage

        Returns:
            Post text

        Raises:
            WorkflowError: If the report is missing, the LLM call fails or
                the LLM returns nothing
        """
        final_report = state.get("final_report")
        if not final_report:
            raise WorkflowError(
                "Cannot generate a social post without a report",
                context={"workflow_id": state.get("workflow_id")},
            )

        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=build_user_prompt(state["target_company"], final_report)),
        ]
        settings = context.settings if context is not None else None
        response = invoke_llm_with_retry(self.llm, messages, label="social_agent", settings=settings)
        if context is not None:
            context.record_usage(response)

        post = StageExecutor.response_text(response)[:MAX_POST_LENGTH]
        if not post:
            raise WorkflowError(
                "LLM returned an empty social post",
                context={"workflow_id": state.get("workflow_id")},
            )

        if context is not None:
            context.log(f"Social post generated ({len(post)} characters)", cost=context.cost or None)
        return post
