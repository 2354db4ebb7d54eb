"""Web search tool used by the Hunter stage for source discovery.

Searches run through the Tavily API (langchain-tavily) with tenacity
retries and are normalized into ``{"url", "title", "snippet", "source"}``
dictionaries.

Example:
    ```python
    from sentinel.tools.web_search import search_web

    for item in search_web("Acme Corp market share", max_results=5):
        print(f"{item['title']}: {item['url']}")
    ```
"""

import logging
import re
from typing import Any, Optional

from langchain_tavily import TavilySearch
from tenacity import (retry, retry_if_exception_type, stop_after_attempt,
                      wait_exponential)

from sentinel.config import get_config
from sentinel.exceptions.collector_error import CollectorError

logger = logging.getLogger(__name__)

MAX_RESULTS_LIMIT = 20


class _TransientSearchError(Exception):
    """Search failure worth retrying."""


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(_TransientSearchError),
    reraise=True,
)
def _perform_tavily_search(query: str, max_results: int, api_key: str) -> list[dict[str, Any]]:
    """Run one Tavily search, retrying transient failures.

    Raises:
        _TransientSearchError: If the search call fails (retried)
    """
    try:
        search_tool = TavilySearch(max_results=max_results, tavily_api_key=api_key)
        raw_response = search_tool.invoke(query)
    except Exception as e:
        logger.warning(f"Tavily search failed for '{query}' (attempt will be retried): {e}")
        raise _TransientSearchError(str(e)) from e

    return _normalize_results(raw_response)


def _normalize_results(raw_response: Any) -> list[dict[str, Any]]:
    """Normalize a Tavily response into a list of result dictionaries.

    TavilySearch returns a dict with a ``results`` list; older clients
    returned the list directly or plain strings.
    """
    if isinstance(raw_response, dict) and "results" in raw_response:
        results = raw_response.get("results") or []
    elif isinstance(raw_response, list):
        results = raw_response
    else:
        results = [raw_response] if raw_response else []

    formatted_results = []
    for result in results:
        if isinstance(result, dict):
            formatted_results.append({
                "url": result.get("url", ""),
                "title": result.get("title", ""),
                "snippet": result.get("content", result.get("snippet", "")),
                "source": "tavily",
            })
        elif isinstance(result, str):
            url_match = re.search(r"https?://[^\s]+", result)
            formatted_results.append({
                "url": url_match.group(0) if url_match else "",
                "title": result.split("\n", 1)[0][:100],
                "snippet": result,
                "source": "tavily",
            })
        else:
            logger.warning(f"Unexpected result format: {type(result)}")
    return formatted_results


def search_web(
    query: str,
    max_results: int = 5,
    api_key: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Search the web for sources about a company.

    Args:
        query: Search query
        max_results: Maximum number of results (1-20)
        api_key: Tavily API key. Defaults to TAVILY_API_KEY from config.

    Returns:
        List of result dictionaries with url, title, snippet and source

    Raises:
        CollectorError: If the query is invalid, the key is missing or the
            search fails after all retries
    """
    if not query or not query.strip():
        raise CollectorError("Query cannot be empty", context={"query": query})
    if max_results < 1 or max_results > MAX_RESULTS_LIMIT:
        raise CollectorError(
            f"max_results must be between 1 and {MAX_RESULTS_LIMIT}, got {max_results}",
            context={"max_results": max_results},
        )

    api_key = (api_key or get_config().tavily_api_key or "").strip()
    if not api_key:
        raise CollectorError(
            "TAVILY_API_KEY not configured. "
            "Set TAVILY_API_KEY in your .env file or environment variables.",
            context={"query": query},
        )

    query = query.strip()
    logger.info(f"Performing web search: query='{query}', max_results={max_results}")
    try:
        results = _perform_tavily_search(query, max_results, api_key)
    except _TransientSearchError as e:
        raise CollectorError(
            f"Web search failed for query: {query}",
            context={"query": query, "max_results": max_results, "error": str(e)},
        ) from e

    results = results[:max_results]
    logger.info(f"Web search successful: found {len(results)} results")
    return results
