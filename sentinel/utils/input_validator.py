"""Input validation and sanitization utilities.

Validates the inputs accepted by the engine before any state is created:
the target company, the analysis type label and source URLs discovered by
the Hunter stage.
"""

import logging
import re
from typing import Any, Optional
from urllib.parse import urlparse, urlunparse

from sentinel.config import get_config
from sentinel.exceptions.invalid_input import InvalidInputError

logger = logging.getLogger(__name__)

# Control characters and markup delimiters stripped from free-text input
DANGEROUS_CHARS = re.compile(r'[<>"\\\x00-\x1f\x7f-\x9f]')

ALLOWED_URL_SCHEMES = {"http", "https"}


def _clean_text(value: str) -> str:
    sanitized = DANGEROUS_CHARS.sub(" ", value)
    return re.sub(r"\s+", " ", sanitized).strip()


def sanitize_target_company(target_company: Any, config: Any | None = None) -> str:
    """Validate and sanitize the company under analysis.

    Args:
        target_company: Raw company name
        config: Optional Config instance. If not provided, uses get_config()

    Returns:
        Trimmed company name with control characters removed

    Raises:
        InvalidInputError: If the name is missing, blank or too long

    Example:
        ```python
        sanitize_target_company("  Acme   Corp ")
        # Returns: "Acme Corp"
        ```
    """
    if config is None:
        config = get_config()

    if not isinstance(target_company, str):
        raise InvalidInputError(
            "Target company must be a string",
            context={"type": type(target_company).__name__},
        )

    sanitized = _clean_text(target_company)
    if not sanitized:
        raise InvalidInputError(
            "Target company cannot be empty",
            context={"length": 0},
        )

    if len(sanitized) > config.max_company_length:
        raise InvalidInputError(
            f"Target company is too long. Maximum length: {config.max_company_length} characters",
            context={
                "length": len(sanitized),
                "max_length": config.max_company_length,
            },
        )

    logger.debug(f"Target company sanitized: {sanitized!r}")
    return sanitized


def sanitize_analysis_type(
    analysis_type: Optional[str],
    config: Any | None = None,
) -> Optional[str]:
    """Validate and sanitize an optional analysis type label.

    Blank labels are treated as absent.

    Returns:
        Cleaned label, or None when no label was supplied

    Raises:
        InvalidInputError: If the label is not a string or is too long
    """
    if analysis_type is None:
        return None
    if config is None:
        config = get_config()

    if not isinstance(analysis_type, str):
        raise InvalidInputError(
            "Analysis type must be a string",
            context={"type": type(analysis_type).__name__},
        )

    sanitized = _clean_text(analysis_type)
    if not sanitized:
        return None

    if len(sanitized) > config.max_analysis_type_length:
        raise InvalidInputError(
            f"Analysis type is too long. Maximum length: {config.max_analysis_type_length} characters",
            context={
                "length": len(sanitized),
                "max_length": config.max_analysis_type_length,
            },
        )
    return sanitized


def validate_url(url: Any) -> tuple[bool, str | None]:
    """Validate and normalize a source URL.

    Only absolute http(s) URLs are accepted. The hostname is lowercased and
    any fragment is dropped.

    Args:
        url: URL string to validate

    Returns:
        Tuple of (is_valid, sanitized_url). sanitized_url is None if invalid.

    Example:
        ```python
        validate_url("https://Example.com/about#team")
        # Returns: (True, "https://example.com/about")

        validate_url("javascript:alert(1)")
        # Returns: (False, None)
        ```
    """
    if not isinstance(url, str) or not url.strip():
        return False, None

    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError:
        logger.debug(f"URL validation failed: unparsable: {url}")
        return False, None

    scheme = parsed.scheme.lower()
    if scheme not in ALLOWED_URL_SCHEMES or not parsed.netloc:
        logger.debug(f"URL validation failed: unsupported scheme or missing host: {url}")
        return False, None

    sanitized = urlunparse((
        scheme,
        parsed.netloc.lower(),
        parsed.path,
        parsed.params,
        parsed.query,
        "",
    ))
    return True, sanitized
