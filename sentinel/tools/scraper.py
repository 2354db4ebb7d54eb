"""Page fetch tool used by the Scraper stage.

Fetches a page with requests (tenacity retries on transport errors) and
extracts readable text with BeautifulSoup.

Example:
    ```python
    from sentinel.tools.scraper import fetch_page

    text = fetch_page("https://example.com/about", timeout=10)
    ```
"""

import logging
from typing import Optional

import requests
from bs4 import BeautifulSoup
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from sentinel.config import get_config
from sentinel.exceptions.collector_error import CollectorError
from sentinel.utils.input_validator import validate_url

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

NON_CONTENT_TAGS = ["script", "style", "nav", "header", "footer", "aside", "noscript"]


def extract_text_from_html(html_content: str) -> str:
    """Extract the main readable text of an HTML document.

    Scripts, styles and navigation chrome are removed; ``main`` or
    ``article`` is preferred over ``body`` when present.

    Returns:
        Whitespace-normalized text content
    """
    soup = BeautifulSoup(html_content, "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""

    for element in soup(NON_CONTENT_TAGS):
        element.decompose()

    main_content = soup.find("main") or soup.find("article") or soup.find("body")
    if main_content:
        content = main_content.get_text(separator=" ", strip=True)
    else:
        content = soup.get_text(separator=" ", strip=True)

    content = " ".join(content.split())
    if title and not content.startswith(title):
        content = f"{title}. {content}" if content else title
    return content


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(requests.RequestException),
    reraise=True,
)
def _fetch_url_content(url: str, timeout: int) -> tuple[str, str]:
    """Fetch a URL, retrying transport failures.

    Returns:
        Tuple of (content_type, body)
    """
    try:
        response = requests.get(
            url,
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            allow_redirects=True,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Request failed for URL {url} (attempt will be retried): {e}")
        raise

    return response.headers.get("Content-Type", "").lower(), response.text


def fetch_page(url: str, timeout: Optional[int] = None) -> str:
    """Fetch a page and return its readable text.

    Args:
        url: Absolute http(s) URL
        timeout: Request timeout in seconds. Defaults to scraper_timeout.

    Returns:
        Extracted text (may be empty for pages without readable content)

    Raises:
        CollectorError: If the URL is invalid or cannot be fetched after
            all retries
    """
    is_valid, sanitized_url = validate_url(url)
    if not is_valid or sanitized_url is None:
        raise CollectorError(f"Invalid URL format: {url}", context={"url": url})

    if timeout is None:
        timeout = get_config().scraper_timeout

    logger.info(f"Scraping URL: {sanitized_url}")
    try:
        content_type, body = _fetch_url_content(sanitized_url, timeout)
    except requests.RequestException as e:
        raise CollectorError(
            f"Failed to fetch URL after retries: {sanitized_url}",
            context={"url": sanitized_url, "timeout": timeout, "error": str(e)},
        ) from e

    if "html" not in content_type and content_type:
        logger.debug(f"Content type is not HTML ({content_type}), using body as text")
        return " ".join(body.split())

    text = extract_text_from_html(body)
    logger.info(f"Successfully scraped URL {sanitized_url}: {len(text)} characters")
    return text
