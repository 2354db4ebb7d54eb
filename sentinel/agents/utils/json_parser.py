"""Extraction of JSON objects from LLM responses.

LLMs often wrap JSON in markdown fences or surround it with prose, and
sometimes leave trailing commas. ``parse_json_object`` tolerates both.
"""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)


class JSONExtractionError(ValueError):
    """Raised when no JSON object can be recovered from a response."""


def parse_json_object(content: str) -> dict[str, Any]:
    """Parse the first JSON object found in an LLM response.

    Args:
        content: LLM response content (may contain JSON or markdown)

    Returns:
        Parsed dictionary

    Raises:
        JSONExtractionError: If no JSON object can be parsed
    """
    json_match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", content, re.DOTALL)
    if json_match:
        json_str = json_match.group(1)
    else:
        json_match = re.search(r"\{.*\}", content, re.DOTALL)
        json_str = json_match.group(0) if json_match else content

    try:
        json_str_clean = re.sub(r"[\x00-\x1f\x7f-\x9f]", " ", json_str)
        json_str_clean = re.sub(r",\s*([}\]])", r"\1", json_str_clean)
        data = json.loads(json_str_clean)
    except json.JSONDecodeError as e:
        logger.debug(f"Failed to parse JSON from response: {e}; content: {content[:500]}")
        raise JSONExtractionError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise JSONExtractionError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def as_string_list(value: Any) -> list[str]:
    """Coerce a JSON value into a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]
