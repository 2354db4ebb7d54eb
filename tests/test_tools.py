"""Tests for the web search and page fetch tools."""

from unittest.mock import Mock, patch

import pytest
import requests

from sentinel.exceptions.collector_error import CollectorError
from sentinel.tools.scraper import extract_text_from_html, fetch_page
from sentinel.tools.web_search import _normalize_results, _TransientSearchError, search_web

SAMPLE_HTML = """
<html>
  <head><title>Acme Corp</title><style>body { color: red; }</style></head>
  <body>
    <nav>Home | About</nav>
    <main><h1>About Acme</h1><p>Acme builds   rockets.</p></main>
    <script>track();</script>
    <footer>Copyright</footer>
  </body>
</html>
"""


class TestSearchWeb:
    """Tests for search_web."""

    @patch("sentinel.tools.web_search.TavilySearch")
    def test_results_are_normalized(self, mock_tavily: Mock) -> None:
        """Test Tavily results are mapped to url/title/snippet."""
        mock_tavily.return_value.invoke.return_value = {
            "results": [
                {"url": "https://acme.example.com", "title": "Acme", "content": "Rockets"},
                {"url": "https://news.example.com/acme", "title": "News", "content": "Funding"},
            ]
        }

        results = search_web("Acme Corp", max_results=2, api_key="key")

        assert [item["url"] for item in results] == [
            "https://acme.example.com",
            "https://news.example.com/acme",
        ]
        assert results[0]["snippet"] == "Rockets"
        mock_tavily.assert_called_once_with(max_results=2, tavily_api_key="key")

    def test_empty_query_rejected(self) -> None:
        """Test blank queries are rejected."""
        with pytest.raises(CollectorError):
            search_web("   ", api_key="key")

    def test_max_results_bounds(self) -> None:
        """Test max_results outside 1..20 is rejected."""
        with pytest.raises(CollectorError):
            search_web("Acme", max_results=0, api_key="key")
        with pytest.raises(CollectorError):
            search_web("Acme", max_results=21, api_key="key")

    def test_missing_api_key(self) -> None:
        """Test a missing Tavily key is reported."""
        with patch("sentinel.tools.web_search.get_config") as mock_get_config:
            mock_get_config.return_value.tavily_api_key = None
            with pytest.raises(CollectorError) as exc_info:
                search_web("Acme")

        assert "TAVILY_API_KEY" in str(exc_info.value)

    @patch("sentinel.tools.web_search._perform_tavily_search")
    def test_search_failure_becomes_collector_error(self, mock_search: Mock) -> None:
        """Test exhausted retries raise CollectorError."""
        mock_search.side_effect = _TransientSearchError("timeout")

        with pytest.raises(CollectorError) as exc_info:
            search_web("Acme", api_key="key")

        assert exc_info.value.context["query"] == "Acme"

    def test_normalize_plain_strings(self) -> None:
        """Test string results have their URL extracted."""
        results = _normalize_results(["Acme news https://news.example.com/acme today"])

        assert results[0]["url"] == "https://news.example.com/acme"


class TestFetchPage:
    """Tests for fetch_page and HTML extraction."""

    def test_extract_text_prefers_main(self) -> None:
        """Test navigation, scripts and styles are removed."""
        text = extract_text_from_html(SAMPLE_HTML)

        assert text == "Acme Corp. About Acme Acme builds rockets."

    @patch("sentinel.tools.scraper.requests.get")
    def test_fetch_html_page(self, mock_get: Mock) -> None:
        """Test HTML pages are converted to text."""
        mock_get.return_value = Mock(
            text=SAMPLE_HTML,
            headers={"Content-Type": "text/html; charset=utf-8"},
        )

        text = fetch_page("https://Acme.example.com/about", timeout=5)

        assert "Acme builds rockets." in text
        assert mock_get.call_args.args[0] == "https://acme.example.com/about"
        assert mock_get.call_args.kwargs["timeout"] == 5

    @patch("sentinel.tools.scraper.requests.get")
    def test_fetch_plain_text(self, mock_get: Mock) -> None:
        """Test non-HTML bodies are returned as normalized text."""
        mock_get.return_value = Mock(text="line one\n\nline   two", headers={"Content-Type": "text/plain"})

        assert fetch_page("https://acme.example.com/robots.txt") == "line one line two"

    def test_invalid_url_rejected(self) -> None:
        """Test non-http URLs are rejected before any request."""
        with pytest.raises(CollectorError):
            fetch_page("javascript:alert(1)")

    @patch("sentinel.tools.scraper._fetch_url_content")
    def test_fetch_failure_becomes_collector_error(self, mock_fetch: Mock) -> None:
        """Test transport failures raise CollectorError."""
        mock_fetch.side_effect = requests.ConnectionError("refused")

        with pytest.raises(CollectorError) as exc_info:
            fetch_page("https://acme.example.com")

        assert exc_info.value.context["url"] == "https://acme.example.com"
