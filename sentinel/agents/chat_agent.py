"""Follow-up chat over a finished analysis.

AnalystChat keeps a conversation whose system prompt carries the company,
analysis type, raw extracted data, SWOT JSON and final report of one run.

Example:
    ```python
    chat = engine.open_chat(workflow_id)
    chat.ask("Which threat is most urgent?")
    ```
"""

import json
import logging
from threading import Lock
from typing import Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from sentinel.agents.base_agent import StageExecutor
from sentinel.agents.prompts.chat_prompts import SYSTEM_PROMPT, build_chat_context
from sentinel.config import Config
from sentinel.exceptions.invalid_input import InvalidInputError
from sentinel.graph.state import DEFAULT_ANALYSIS_TYPE, AgentState
from sentinel.utils.rate_limiter import invoke_llm_with_retry
from sentinel.utils.usage import UsageAccumulator, estimate_cost, extract_token_usage

logger = logging.getLogger(__name__)

CONNECTION_ERROR_REPLY = "Error connecting to analyst agent."
EMPTY_REPLY = "I couldn't generate a response."


def build_context(state: AgentState) -> str:
    """Render the chat context for a run state."""
    return build_chat_context(
        target_company=state.get("target_company", ""),
        analysis_type=state.get("analysis_type") or DEFAULT_ANALYSIS_TYPE,
        extracted_content=state.get("extracted_content") or "",
        swot_json=json.dumps(state.get("swot_analysis")),
        final_report=state.get("final_report") or "",
    )


class AnalystChat:
    """Conversation with the analyst about one finished analysis.

    Failures never raise: a failed LLM call answers with
    "Error connecting to analyst agent." and an empty answer with
    "I couldn't generate a response.". Only successful exchanges are kept
    in the history sent with later questions.
    """

    def __init__(
        self,
        llm: BaseChatModel,
        state: AgentState,
        usage: Optional[UsageAccumulator] = None,
        cost_per_1k_tokens: float = 0.0,
        settings: Optional[Config] = None,
    ) -> None:
        if not isinstance(llm, BaseChatModel):
            raise TypeError(
                f"llm must be a BaseChatModel instance, got {type(llm).__name__}"
            )
        self.llm = llm
        self.workflow_id = state.get("workflow_id")
        self.context = build_context(state)
        self._usage = usage
        self._cost_per_1k_tokens = cost_per_1k_tokens
        self._settings = settings
        self._history: list[BaseMessage] = []
        self._lock = Lock()

    @property
    def history(self) -> list[tuple[str, str]]:
        """Return the conversation as ``(role, text)`` pairs."""
        with self._lock:
            return [
                ("user" if isinstance(message, HumanMessage) else "model", str(message.content))
                for message in self._history
            ]

    def ask(self, message: str) -> str:
        """Ask a follow-up question.

        Args:
            message: User question

        Returns:
            The analyst's answer, or a fallback message

        Raises:
            InvalidInputError: If the message is blank
        """
        if not message or not message.strip():
            raise InvalidInputError("Chat message cannot be empty")

        question = HumanMessage(content=message.strip())
        with self._lock:
            messages = [
                SystemMessage(content=SYSTEM_PROMPT.format(context=self.context)),
                *self._history,
                question,
            ]
            try:
                response = invoke_llm_with_retry(
                    self.llm, messages, label="analyst_chat", settings=self._settings
                )
            except Exception as e:
                logger.error(f"Analyst chat failed for workflow {self.workflow_id}: {e}")
                return CONNECTION_ERROR_REPLY

            self._record_usage(response)
            answer = StageExecutor.response_text(response)
            if not answer:
                return EMPTY_REPLY

            self._history.extend([question, AIMessage(content=answer)])
            return answer

    def _record_usage(self, response: object) -> None:
        if self._usage is None:
            return
        usage = extract_token_usage(response)
        if usage:
            tokens = usage["total_tokens"]
            self._usage.add_usage(estimate_cost(tokens, self._cost_per_1k_tokens), tokens)
