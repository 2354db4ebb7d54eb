"""Cost and token accounting.

This module aggregates usage across completed workflows and extracts token
counts from LangChain responses.
"""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowStats:
    """Snapshot of accumulated usage statistics.

    Attributes:
        total_cost: Summed USD cost across completed workflows
        avg_execution_time_ms: Running mean of workflow wall-clock time
        total_workflows: Number of workflows recorded
        total_tokens: Summed token count
    """

    total_cost: float = 0.0
    avg_execution_time_ms: float = 0.0
    total_workflows: int = 0
    total_tokens: int = 0


class UsageAccumulator:
    """Thread-safe running statistics over all finished workflows.

    Counters start at zero and are never reset for the life of the process.
    """

    def __init__(self) -> None:
        self._total_cost = 0.0
        self._total_tokens = 0
        self._total_workflows = 0
        self._avg_execution_time_ms = 0.0
        self._lock = Lock()

    def record(self, cost: float, tokens: int, execution_time_ms: float) -> None:
        """Fold one finished workflow into the statistics.

        Args:
            cost: USD cost of the workflow
            tokens: Tokens consumed by the workflow
            execution_time_ms: Wall-clock duration in milliseconds

        Raises:
            ValueError: If any value is negative
        """
        _check_non_negative(cost=cost, tokens=tokens, execution_time_ms=execution_time_ms)
        with self._lock:
            self._total_workflows += 1
            self._total_cost += cost
            self._total_tokens += int(tokens)
            # Incremental mean avoids keeping every sample
            self._avg_execution_time_ms += (
                execution_time_ms - self._avg_execution_time_ms
            ) / self._total_workflows
        logger.debug(
            f"Usage recorded: cost={cost:.6f}, tokens={tokens}, time={execution_time_ms:.1f}ms"
        )

    def add_usage(self, cost: float, tokens: int) -> None:
        """Add cost and tokens that do not belong to a workflow run.

        Used for social posts and chat answers derived after a run finished.

        Raises:
            ValueError: If any value is negative
        """
        _check_non_negative(cost=cost, tokens=tokens)
        with self._lock:
            self._total_cost += cost
            self._total_tokens += int(tokens)

    def stats(self) -> WorkflowStats:
        """Return a consistent snapshot of the statistics."""
        with self._lock:
            return WorkflowStats(
                total_cost=self._total_cost,
                avg_execution_time_ms=self._avg_execution_time_ms,
                total_workflows=self._total_workflows,
                total_tokens=self._total_tokens,
            )


def _check_non_negative(**values: float) -> None:
    for name, value in values.items():
        if value < 0:
            raise ValueError(f"{name} must be non-negative, got {value}")


def extract_token_usage(result: Any) -> Optional[dict[str, int]]:
    """Extract token usage information from an LLM response.

    Checks common attributes where LLM responses store token usage:
    - usage_metadata (LangChain AIMessage)
    - response_metadata["token_usage"] / ["usage"] (provider metadata)
    - usage / token_usage attributes

    Args:
        result: Response object that might contain token usage info

    Returns:
        Dictionary with prompt_tokens, completion_tokens and total_tokens,
        or None if not available
    """
    if result is None:
        return None

    usage_metadata = getattr(result, "usage_metadata", None)
    if isinstance(usage_metadata, dict) and usage_metadata:
        prompt = int(usage_metadata.get("input_tokens", 0) or 0)
        completion = int(usage_metadata.get("output_tokens", 0) or 0)
        total = int(usage_metadata.get("total_tokens", 0) or prompt + completion)
        return {
            "prompt_tokens": prompt,
            "completion_tokens": completion,
            "total_tokens": total,
        }

    metadata = getattr(result, "response_metadata", None)
    if isinstance(metadata, dict):
        usage = metadata.get("token_usage") or metadata.get("usage")
        if isinstance(usage, dict):
            return _normalize_usage(usage)

    for attr in ("usage", "token_usage"):
        usage = getattr(result, attr, None)
        if isinstance(usage, dict):
            return _normalize_usage(usage)

    return None


def _normalize_usage(usage: dict[str, Any]) -> dict[str, int]:
    prompt = int(usage.get("prompt_tokens", usage.get("input_tokens", 0)) or 0)
    completion = int(usage.get("completion_tokens", usage.get("output_tokens", 0)) or 0)
    total = int(usage.get("total_tokens", 0) or prompt + completion)
    return {
        "prompt_tokens": prompt,
        "completion_tokens": completion,
        "total_tokens": total,
    }


def estimate_cost(tokens: int, cost_per_1k_tokens: float) -> float:
    """Convert a token count to an estimated USD cost."""
    return tokens / 1000 * cost_per_1k_tokens
