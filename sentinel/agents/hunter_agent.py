"""Hunter agent: discovers source URLs for the target company.

Runs the Router's search queries (or default queries built from the
company and analysis type) through the injected search tool and keeps the
first ``hunter_max_urls`` distinct http(s) URLs in discovery order.
"""

import logging
from typing import Any, Callable, Optional

from sentinel.agents.base_agent import StageExecutor
from sentinel.agents.context import StageContext
from sentinel.graph.state import DEFAULT_ANALYSIS_TYPE, AgentRole, AgentState
from sentinel.graph.state_utils import update_state
from sentinel.tools.web_search import search_web
from sentinel.utils.input_validator import validate_url

logger = logging.getLogger(__name__)

SearchTool = Callable[[str, int], list[dict[str, Any]]]


def default_search_queries(target_company: str, analysis_type: str) -> list[str]:
    """Build fallback search queries when the Router proposed none."""
    queries = []
    if analysis_type and analysis_type != DEFAULT_ANALYSIS_TYPE:
        queries.append(f"{target_company} {analysis_type} analysis")
    else:
        queries.append(f"{target_company} company overview")
    queries.append(f"{target_company} market share competitors")
    queries.append(f"{target_company} latest news")
    return queries


class HunterAgent(StageExecutor):
    """Discovers source URLs through a search tool.

    Args:
        search_tool: Callable ``(query, max_results) -> list of result dicts``
            with a ``url`` key. Defaults to the Tavily web search.
        llm: Unused; accepted for a uniform constructor
        config: Optional overrides: ``max_urls``, ``results_per_query``
    """

    def __init__(
        self,
        search_tool: Optional[SearchTool] = None,
        llm: Any = None,
        config: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(llm=llm, config=config)
        self.search_tool = search_tool or search_web

    def execute(self, state: AgentState, context: StageContext) -> AgentState:
        settings = context.settings
        max_urls = int(self.config.get("max_urls", settings.hunter_max_urls))
        results_per_query = int(
            self.config.get("results_per_query", settings.hunter_results_per_query)
        )

        target_company = state["target_company"]
        intent = state.get("intent") or {}
        queries = list(intent.get("search_queries") or []) or default_search_queries(
            target_company, state.get("analysis_type") or DEFAULT_ANALYSIS_TYPE
        )

        existing = list(state.get("discovered_urls") or [])
        seen = set(existing)
        new_urls: list[str] = []
        failed_queries = 0

        for query in queries:
            if len(new_urls) >= max_urls:
                break
            context.log(f"Searching: {query}")
            try:
                results = self.search_tool(query, results_per_query) or []
            except Exception as e:
                failed_queries += 1
                logger.warning(f"Search failed for '{query}': {e}")
                context.log(f"Search failed for '{query}': {e}")
                continue

            for result in results:
                url = result.get("url") if isinstance(result, dict) else result
                is_valid, sanitized = validate_url(url)
                if not is_valid or sanitized in seen:
                    continue
                seen.add(sanitized)
                new_urls.append(sanitized)
                if len(new_urls) >= max_urls:
                    break

        if not new_urls:
            raise self.fail(
                f"No sources discovered for {target_company}",
                queries=queries,
                failed_queries=failed_queries,
            )

        context.log(f"Discovered {len(new_urls)} sources")
        return update_state(state, discovered_urls=existing + new_urls)

    @property
    def role(self) -> AgentRole:
        return AgentRole.HUNTER
