"""Reporter agent: synthesizes the final markdown report."""

import json
import logging
import re

from langchain_core.messages import HumanMessage, SystemMessage

from sentinel.agents.base_agent import StageExecutor, agent_error_handler
from sentinel.agents.context import StageContext
from sentinel.agents.prompts.reporter_prompts import SYSTEM_PROMPT, build_user_prompt
from sentinel.graph.state import DEFAULT_ANALYSIS_TYPE, AgentRole, AgentState
from sentinel.graph.state_utils import update_state

logger = logging.getLogger(__name__)

DEFAULT_EXCERPT_CHARS = 6000

_FENCE_PATTERN = re.compile(r"^```(?:markdown|md)?\s*\n(.*?)\n?```\s*$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove a markdown code fence wrapping the whole text, if any."""
    match = _FENCE_PATTERN.match(text.strip())
    return match.group(1).strip() if match else text.strip()


class ReporterAgent(StageExecutor):
    """Writes ``final_report`` from the SWOT analysis and source excerpts.

    A short or empty report is not a stage failure; the engine records it
    as a report generation issue.
    """

    requires_llm = True

    def execute(self, state: AgentState, context: StageContext) -> AgentState:
        swot_analysis = state.get("swot_analysis")
        if not swot_analysis:
            raise self.fail("Cannot write a report without a SWOT analysis")

        excerpt_chars = int(self.config.get("excerpt_chars", DEFAULT_EXCERPT_CHARS))
        user_prompt = build_user_prompt(
            state["target_company"],
            state.get("analysis_type") or DEFAULT_ANALYSIS_TYPE,
            json.dumps(swot_analysis, indent=2),
            list(state.get("discovered_urls") or []),
            (state.get("extracted_content") or "")[:excerpt_chars],
        )

        context.log("Writing final report")
        report = self._generate_report(user_prompt, context)

        context.log(f"Report generated ({len(report)} characters)", cost=context.cost or None)
        return update_state(state, final_report=report)

    @agent_error_handler(AgentRole.REPORTER, "report")
    def _generate_report(self, user_prompt: str, context: StageContext) -> str:
        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=user_prompt),
        ]
        response = self.invoke_llm(messages, context)
        return strip_code_fence(self.response_text(response))

    @property
    def role(self) -> AgentRole:
        return AgentRole.REPORTER
