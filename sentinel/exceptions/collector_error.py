"""Collector error exception.

This module defines the CollectorError exception raised when source
discovery or content extraction tools fail (web search, page fetches).
"""

from sentinel.exceptions.base import BaseWorkflowError


class CollectorError(BaseWorkflowError):
    """Raised when a search or scraping tool fails.

    It should include context about what was being collected and why
    it failed (query, URL, status code).
    """

    pass
