"""Tests for rate limiter and retry logic.

This module contains unit tests for the rate limiter to verify
retry attempts, rate limit detection, and error handling.
"""

from unittest.mock import Mock

import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, HumanMessage

from sentinel.config import reload_config
from sentinel.exceptions.workflow_error import WorkflowError
from sentinel.utils.rate_limiter import (
    RateLimitError,
    _is_rate_limit_error,
    invoke_llm_with_retry,
    retry_llm_call,
)


@pytest.fixture
def three_attempts(monkeypatch: pytest.MonkeyPatch) -> None:
    """Allow three attempts per call."""
    monkeypatch.setenv("LLM_RETRY_ATTEMPTS", "3")
    reload_config()


class TestRateLimitDetection:
    """Tests for rate limit error detection."""

    def test_detects_rate_limit_in_error_message(self) -> None:
        """Test rate limit detection from error message."""
        assert _is_rate_limit_error(Exception("Rate limit exceeded")) is True

    def test_detects_429_status_code(self) -> None:
        """Test rate limit detection from HTTP 429 status code."""
        error = Exception("failed")
        error.status_code = 429  # type: ignore[attr-defined]
        assert _is_rate_limit_error(error) is True

    def test_detects_rate_limit_in_response(self) -> None:
        """Test rate limit detection from response status code."""
        error = Exception("failed")
        error.response = Mock(status_code=429)  # type: ignore[attr-defined]
        assert _is_rate_limit_error(error) is True

    def test_detects_quota_exceeded(self) -> None:
        """Test rate limit detection from quota exceeded message."""
        assert _is_rate_limit_error(Exception("Quota exceeded for this API")) is True

    def test_does_not_detect_non_rate_limit_error(self) -> None:
        """Test that non-rate-limit errors are not detected."""
        assert _is_rate_limit_error(Exception("Invalid API key")) is False


class TestRetryLlmCall:
    """Tests for the retry decorator."""

    def test_success_on_first_attempt(self) -> None:
        """Test a successful call is made once."""
        func = Mock(return_value="ok")
        func.__name__ = "func"

        assert retry_llm_call(func)() == "ok"
        func.assert_called_once()

    def test_retries_until_success(self, three_attempts: None) -> None:
        """Test transient failures are retried."""
        func = Mock(side_effect=[Exception("Connection reset"), "ok"])
        func.__name__ = "func"

        assert retry_llm_call(func)() == "ok"
        assert func.call_count == 2

    def test_rate_limit_is_wrapped(self, three_attempts: None) -> None:
        """Test rate limit failures surface as RateLimitError after retries."""
        func = Mock(side_effect=Exception("429 Too Many Requests"))
        func.__name__ = "func"

        with pytest.raises(RateLimitError):
            retry_llm_call(func)()
        assert func.call_count == 3


class TestInvokeLlmWithRetry:
    """Tests for invoke_llm_with_retry."""

    def test_returns_response(self) -> None:
        """Test the LLM response is returned."""
        llm = Mock(spec=BaseChatModel)
        llm.invoke.return_value = AIMessage(content="answer")
        messages = [HumanMessage(content="question")]

        assert invoke_llm_with_retry(llm, messages).content == "answer"
        llm.invoke.assert_called_once_with(messages)

    def test_rate_limit_becomes_workflow_error(self) -> None:
        """Test exhausted rate limit retries raise WorkflowError."""
        llm = Mock(spec=BaseChatModel)
        llm.invoke.side_effect = Exception("rate limit exceeded")

        with pytest.raises(WorkflowError) as exc_info:
            invoke_llm_with_retry(llm, [HumanMessage(content="question")])

        assert "rate limit" in str(exc_info.value)

    def test_other_failure_becomes_workflow_error(self) -> None:
        """Test exhausted retries raise WorkflowError with the error type."""
        llm = Mock(spec=BaseChatModel)
        llm.invoke.side_effect = ConnectionError("unreachable")

        with pytest.raises(WorkflowError) as exc_info:
            invoke_llm_with_retry(llm, [HumanMessage(content="question")])

        assert exc_info.value.message == "LLM API call failed after retries"
        assert exc_info.value.context["error_type"] == "ConnectionError"

    def test_error_context_names_caller(self) -> None:
        """Test the caller label is carried into the error context."""
        llm = Mock(spec=BaseChatModel)
        llm.invoke.side_effect = ValueError("bad response")

        with pytest.raises(WorkflowError) as exc_info:
            invoke_llm_with_retry(llm, [HumanMessage(content="question")], label="analyst_agent")

        assert exc_info.value.context["caller"] == "analyst_agent"
