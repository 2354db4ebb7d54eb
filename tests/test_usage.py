"""Tests for usage accounting and token extraction."""

import threading
from types import SimpleNamespace

import pytest
from langchain_core.messages import AIMessage

from sentinel.utils.usage import UsageAccumulator, estimate_cost, extract_token_usage


class TestUsageAccumulator:
    """Tests for UsageAccumulator."""

    def test_starts_at_zero(self) -> None:
        """Test a new accumulator reports zero usage."""
        stats = UsageAccumulator().stats()

        assert stats.total_workflows == 0
        assert stats.total_cost == 0.0
        assert stats.total_tokens == 0
        assert stats.avg_execution_time_ms == 0.0

    def test_average_execution_time(self) -> None:
        """Test the average is the mean of recorded durations."""
        usage = UsageAccumulator()
        for duration in (10, 20, 30):
            usage.record(0.0, 0, duration)

        stats = usage.stats()
        assert stats.avg_execution_time_ms == pytest.approx(20.0)
        assert stats.total_workflows == 3

    def test_totals_accumulate(self) -> None:
        """Test cost and tokens are summed."""
        usage = UsageAccumulator()
        usage.record(0.01, 100, 5.0)
        usage.record(0.02, 250, 5.0)

        stats = usage.stats()
        assert stats.total_tokens == 350
        assert stats.total_cost == pytest.approx(0.03)

    def test_add_usage_does_not_count_a_workflow(self) -> None:
        """Test derived usage changes totals but not the workflow count."""
        usage = UsageAccumulator()
        usage.record(0.01, 100, 40.0)
        usage.add_usage(0.005, 50)

        stats = usage.stats()
        assert stats.total_workflows == 1
        assert stats.total_tokens == 150
        assert stats.avg_execution_time_ms == pytest.approx(40.0)

    def test_negative_values_rejected(self) -> None:
        """Test negative usage is rejected."""
        usage = UsageAccumulator()

        with pytest.raises(ValueError):
            usage.record(-1.0, 0, 0)
        with pytest.raises(ValueError):
            usage.add_usage(0.0, -5)

    def test_concurrent_records(self) -> None:
        """Test records from many threads are all counted."""
        usage = UsageAccumulator()

        def worker() -> None:
            for _ in range(100):
                usage.record(0.001, 10, 1.0)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stats = usage.stats()
        assert stats.total_workflows == 800
        assert stats.total_tokens == 8000
        assert stats.avg_execution_time_ms == pytest.approx(1.0)


class TestExtractTokenUsage:
    """Tests for extract_token_usage."""

    def test_from_usage_metadata(self) -> None:
        """Test LangChain usage_metadata is preferred."""
        message = AIMessage(
            content="ok",
            usage_metadata={"input_tokens": 10, "output_tokens": 5, "total_tokens": 15},
        )

        assert extract_token_usage(message) == {
            "prompt_tokens": 10,
            "completion_tokens": 5,
            "total_tokens": 15,
        }

    def test_from_response_metadata(self) -> None:
        """Test provider token_usage metadata is read."""
        message = AIMessage(
            content="ok",
            response_metadata={"token_usage": {"prompt_tokens": 7, "completion_tokens": 3}},
        )

        assert extract_token_usage(message)["total_tokens"] == 10

    def test_from_usage_attribute(self) -> None:
        """Test a plain usage attribute is read."""
        result = SimpleNamespace(usage={"input_tokens": 4, "output_tokens": 4, "total_tokens": 8})

        assert extract_token_usage(result)["total_tokens"] == 8

    def test_missing_usage(self) -> None:
        """Test responses without usage return None."""
        assert extract_token_usage(AIMessage(content="ok")) is None
        assert extract_token_usage(None) is None

    def test_estimate_cost(self) -> None:
        """Test tokens are priced per thousand."""
        assert estimate_cost(2000, 0.5) == pytest.approx(1.0)
