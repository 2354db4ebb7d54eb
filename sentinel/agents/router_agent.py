"""Router agent: classifies the intent of an analysis request.

The Router asks the LLM which kind of competitive analysis is requested and
which search queries should be used for source discovery. Its output is the
``intent`` field of the run state.
"""

import logging
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage

from sentinel.agents.base_agent import StageExecutor, agent_error_handler
from sentinel.agents.context import StageContext
from sentinel.agents.prompts.router_prompts import SYSTEM_PROMPT, build_user_prompt
from sentinel.agents.utils.json_parser import as_string_list, parse_json_object
from sentinel.graph.state import DEFAULT_ANALYSIS_TYPE, AgentRole, AgentState
from sentinel.graph.state_utils import update_state

logger = logging.getLogger(__name__)

MAX_SEARCH_QUERIES = 5


class RouterAgent(StageExecutor):
    """Classifies the analysis intent with an LLM.

    Writes ``intent`` as ``{"category", "focus_areas", "search_queries"}``.
    """

    requires_llm = True

    def execute(self, state: AgentState, context: StageContext) -> AgentState:
        target_company = state["target_company"]
        analysis_type = state.get("analysis_type") or DEFAULT_ANALYSIS_TYPE

        context.log(f"Classifying intent for {target_company} ({analysis_type})")
        intent = self._classify_intent(target_company, analysis_type, context)

        context.log(
            f"Intent classified as '{intent['category']}' with "
            f"{len(intent['search_queries'])} search queries",
            cost=context.cost or None,
        )
        return update_state(state, intent=intent)

    @agent_error_handler(AgentRole.ROUTER, "intent classification")
    def _classify_intent(
        self,
        target_company: str,
        analysis_type: str,
        context: StageContext,
    ) -> dict[str, Any]:
        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=build_user_prompt(target_company, analysis_type)),
        ]
        response = self.invoke_llm(messages, context)
        content = self.response_text(response)
        if not content:
            raise self.fail("LLM returned empty response")

        logger.debug(f"Router response: {content[:200]}...")
        data = parse_json_object(content)

        category = str(data.get("category") or analysis_type).strip()
        return {
            "category": category or analysis_type,
            "focus_areas": as_string_list(data.get("focus_areas")),
            "search_queries": as_string_list(data.get("search_queries"))[:MAX_SEARCH_QUERIES],
        }

    @property
    def role(self) -> AgentRole:
        return AgentRole.ROUTER
