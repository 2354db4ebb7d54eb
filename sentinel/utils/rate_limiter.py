"""Retry handling for LLM calls.

Stage executors, the social post generator and the analyst chat all call
their model through ``invoke_llm_with_retry``. Transient failures are
retried with exponential backoff; whatever is still failing after the last
attempt surfaces as a WorkflowError labelled with the caller. The engine
never retries a whole stage.
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from tenacity import (
    RetryCallState,
    before_sleep_log,
    retry,
    stop_after_attempt,
    wait_exponential,
)

from sentinel.config import Config, get_config
from sentinel.exceptions.workflow_error import WorkflowError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Substrings seen in provider errors (Groq, OpenAI-compatible, HTTP clients)
RATE_LIMIT_MARKERS = (
    "rate limit",
    "rate_limit",
    "ratelimit",
    "429",
    "too many requests",
    "quota exceeded",
    "quota_exceeded",
    "throttl",
)


def _status_code(exception: Exception) -> Optional[int]:
    code = getattr(exception, "status_code", None)
    if code is None:
        code = getattr(getattr(exception, "response", None), "status_code", None)
    return code


def _is_rate_limit_error(exception: Exception) -> bool:
    """Return True if the exception looks like a provider rate limit."""
    if _status_code(exception) == 429:
        return True
    haystack = f"{type(exception).__name__} {exception}".lower()
    return any(marker in haystack for marker in RATE_LIMIT_MARKERS)


class RateLimitError(Exception):
    """A provider rate limit, kept separate so it can be reported as such."""

    def __init__(self, original_exception: Exception) -> None:
        super().__init__(f"Rate limit error: {original_exception}")
        self.original_exception = original_exception


def retry_llm_call(
    func: Callable[..., T],
    label: Optional[str] = None,
    settings: Optional[Config] = None,
) -> Callable[..., T]:
    """Wrap ``func`` with the configured retry policy.

    Attempts and backoff bounds come from ``llm_retry_attempts``,
    ``llm_retry_backoff_min`` and ``llm_retry_backoff_max`` of ``settings``
    (the global Config when omitted) at wrap time.
    Rate limit failures are re-raised as RateLimitError once retries run out.

    Args:
        func: Callable performing a single LLM request
        label: Name used in retry log lines; defaults to the function name
        settings: Configuration holding the retry policy

    Returns:
        Wrapped callable
    """
    config = settings or get_config()
    label = label or func.__name__

    def log_retry(retry_state: RetryCallState) -> bool:
        outcome = retry_state.outcome
        if outcome is None or outcome.exception() is None:
            return False
        error = outcome.exception()
        if isinstance(error, RateLimitError):
            logger.warning(f"{label}: rate limited (attempt {retry_state.attempt_number})")
        else:
            logger.debug(
                f"{label}: attempt {retry_state.attempt_number} failed with "
                f"{type(error).__name__}: {str(error)[:200]}"
            )
        return True

    @wraps(func)
    @retry(
        stop=stop_after_attempt(config.llm_retry_attempts),
        wait=wait_exponential(
            multiplier=1,
            min=config.llm_retry_backoff_min,
            max=config.llm_retry_backoff_max,
        ),
        retry=log_retry,
        reraise=True,
        before_sleep=before_sleep_log(logger, logging.DEBUG),
    )
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return func(*args, **kwargs)
        except RateLimitError:
            raise
        except Exception as e:
            if _is_rate_limit_error(e):
                raise RateLimitError(e) from e
            raise

    return wrapper


def invoke_llm_with_retry(
    llm: Any,
    messages: list[Any],
    label: str = "llm",
    settings: Optional[Config] = None,
    **kwargs: Any
) -> Any:
    """Call ``llm.invoke(messages, **kwargs)`` under the retry policy.

    Args:
        llm: Chat model (BaseChatModel)
        messages: Messages to send
        label: Caller name for logs and error context, e.g. "analyst_agent"
        settings: Configuration holding the retry policy; global Config when omitted
        **kwargs: Forwarded to llm.invoke()

    Returns:
        The model response

    Raises:
        WorkflowError: Once every attempt has failed
    """
    settings = settings or get_config()
    attempts = settings.llm_retry_attempts

    def _invoke() -> Any:
        return llm.invoke(messages, **kwargs)

    try:
        return retry_llm_call(_invoke, label=label, settings=settings)()
    except RateLimitError as e:
        raise WorkflowError(
            "LLM API rate limit exceeded after retries",
            context={
                "caller": label,
                "error": str(e.original_exception),
                "retry_attempts": attempts,
            }
        ) from e.original_exception
    except Exception as e:
        raise WorkflowError(
            "LLM API call failed after retries",
            context={
                "caller": label,
                "error": str(e),
                "error_type": type(e).__name__,
                "retry_attempts": attempts,
            }
        ) from e
