"""Analyst agent: structured SWOT analysis with strategic scores.

This agent transforms the extracted source content into a SWOTAnalysis
model. Scores are clamped to [0, 100] during validation and missing
metrics default to 0.
"""

import logging
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import ValidationError

from sentinel.agents.base_agent import StageExecutor, agent_error_handler
from sentinel.agents.context import StageContext
from sentinel.agents.prompts.analyst_prompts import SYSTEM_PROMPT, build_user_prompt
from sentinel.agents.utils.json_parser import parse_json_object
from sentinel.graph.state import DEFAULT_ANALYSIS_TYPE, AgentRole, AgentState
from sentinel.graph.state_utils import update_state
from sentinel.models.swot_model import SWOTAnalysis

logger = logging.getLogger(__name__)

DEFAULT_MAX_INPUT_CHARS = 24000


class AnalystAgent(StageExecutor):
    """Produces the SWOT analysis from extracted content.

    Attributes:
        llm: Language model instance (injected)
        config: Optional overrides: ``max_input_chars``
    """

    requires_llm = True

    def execute(self, state: AgentState, context: StageContext) -> AgentState:
        """Execute SWOT analysis.

        Args:
            state: Run state containing extracted_content

        Returns:
            Updated AgentState with swot_analysis populated

        Raises:
            StageFailure: If there is no content, the LLM call fails or the
                response cannot be turned into a non-empty SWOT analysis
        """
        extracted_content = state.get("extracted_content") or ""
        if not extracted_content.strip():
            raise self.fail("Cannot analyze without extracted content")

        max_input_chars = int(self.config.get("max_input_chars", DEFAULT_MAX_INPUT_CHARS))
        if len(extracted_content) > max_input_chars:
            logger.info(
                f"Extracted content truncated for analysis: "
                f"{len(extracted_content)} -> {max_input_chars} characters"
            )
            extracted_content = extracted_content[:max_input_chars]

        intent = state.get("intent") or {}
        context.log("Generating SWOT analysis")
        swot_data = self._generate_swot(
            build_user_prompt(
                state["target_company"],
                state.get("analysis_type") or DEFAULT_ANALYSIS_TYPE,
                list(intent.get("focus_areas") or []),
                extracted_content,
            ),
            context,
        )

        try:
            swot = SWOTAnalysis(**swot_data)
        except ValidationError as e:
            logger.error(f"SWOT validation failed: {e}")
            raise self.fail("Generated SWOT analysis failed validation", validation_errors=str(e)) from e

        if swot.is_empty():
            raise self.fail("Generated SWOT analysis is empty")

        scores = swot.scores
        context.log(
            f"SWOT complete: {len(swot.strengths)} strengths, {len(swot.weaknesses)} weaknesses, "
            f"{len(swot.opportunities)} opportunities, {len(swot.threats)} threats "
            f"(innovation={scores.innovation}, market_share={scores.market_share})",
            cost=context.cost or None,
        )
        return update_state(state, swot_analysis=swot.model_dump())

    @agent_error_handler(AgentRole.ANALYST, "SWOT analysis")
    def _generate_swot(self, user_prompt: str, context: StageContext) -> dict[str, Any]:
        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=user_prompt),
        ]
        response = self.invoke_llm(messages, context)
        content = self.response_text(response)
        if not content:
            raise self.fail("LLM returned empty response")

        logger.debug(f"Analyst response: {content[:200]}...")
        data = parse_json_object(content)

        # Some models nest the categories under a "swot" key
        nested = data.get("swot")
        if isinstance(nested, dict):
            data = {**nested, "scores": data.get("scores", nested.get("scores"))}

        for category in ("strengths", "weaknesses", "opportunities", "threats"):
            if not isinstance(data.get(category), (list, str, type(None))):
                data[category] = []
        if not isinstance(data.get("scores"), dict):
            data["scores"] = {}
        return data

    @property
    def role(self) -> AgentRole:
        return AgentRole.ANALYST
