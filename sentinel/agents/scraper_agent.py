"""Scraper agent: extracts text from the discovered sources."""

import logging
from typing import Any, Callable, Optional

from sentinel.agents.base_agent import StageExecutor
from sentinel.agents.context import StageContext
from sentinel.graph.state import AgentRole, AgentState
from sentinel.graph.state_utils import update_state
from sentinel.tools.scraper import fetch_page

logger = logging.getLogger(__name__)

FetchTool = Callable[[str], str]

SOURCE_SEPARATOR = "\n\n"


def format_source_block(url: str, text: str, max_chars: int) -> str:
    """Format one page as a ``SOURCE: <url>`` block of bounded length."""
    return f"SOURCE: {url}\n{text[:max_chars].strip()}"


class ScraperAgent(StageExecutor):
    """Fetches each discovered URL and appends its text to ``extracted_content``.

    A page that fails or yields no text is logged and skipped. The stage
    fails only when no page produced any content.

    Args:
        fetch_tool: Callable ``(url) -> text``. Defaults to requests + BeautifulSoup.
        llm: Unused; accepted for a uniform constructor
        config: Optional overrides: ``max_chars``
    """

    def __init__(
        self,
        fetch_tool: Optional[FetchTool] = None,
        llm: Any = None,
        config: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(llm=llm, config=config)
        self.fetch_tool = fetch_tool or fetch_page

    def execute(self, state: AgentState, context: StageContext) -> AgentState:
        max_chars = int(self.config.get("max_chars", context.settings.scraper_max_chars))
        urls = list(state.get("discovered_urls") or [])
        if not urls:
            raise self.fail("No discovered sources to scrape")

        blocks: list[str] = []
        for url in urls:
            try:
                text = self.fetch_tool(url) or ""
            except Exception as e:
                logger.warning(f"Failed to scrape {url}: {e}")
                context.log(f"Failed to scrape {url}: {e}")
                continue

            if not text.strip():
                context.log(f"No readable content at {url}")
                continue

            blocks.append(format_source_block(url, text, max_chars))
            context.log(f"Extracted {min(len(text), max_chars)} characters from {url}")

        if not blocks:
            raise self.fail(
                f"No content could be extracted from {len(urls)} sources",
                urls=urls,
            )

        previous = state.get("extracted_content") or ""
        extracted = SOURCE_SEPARATOR.join(blocks)
        if previous:
            extracted = previous + SOURCE_SEPARATOR + extracted

        context.log(f"Extracted content from {len(blocks)} of {len(urls)} sources")
        return update_state(state, extracted_content=extracted)

    @property
    def role(self) -> AgentRole:
        return AgentRole.SCRAPER
