"""Pytest configuration and shared fixtures.

This module contains pytest configuration and shared fixtures used
across all test files.
"""

from typing import Callable, Iterator
from unittest.mock import Mock

import pytest
from langchain_core.language_models import BaseChatModel

from sentinel.config import Config, get_config, reload_config
from sentinel.engine.workflow_engine import WorkflowEngine
from tests.fixtures.sample_data import (
    ai_message,
    sample_intent_json,
    sample_report,
    sample_swot_json,
)


@pytest.fixture(autouse=True)
def test_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[Config]:
    """Reload configuration with fast retries and no persistence.

    Every test starts from a fresh Config so that environment changes made
    by one test never leak into another.
    """
    monkeypatch.setenv("LLM_RETRY_ATTEMPTS", "1")
    monkeypatch.setenv("LLM_RETRY_BACKOFF_MIN", "0.01")
    monkeypatch.setenv("LLM_RETRY_BACKOFF_MAX", "0.01")
    monkeypatch.delenv("HISTORY_PATH", raising=False)
    monkeypatch.delenv("WORKFLOW_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("MIN_REPORT_LENGTH", raising=False)
    yield reload_config()
    reload_config()


@pytest.fixture
def make_llm() -> Callable[..., Mock]:
    """Factory for mock LLMs answering with fixed content."""
    def factory(content: str = "", tokens: int = 100) -> Mock:
        llm = Mock(spec=BaseChatModel)
        llm.invoke.return_value = ai_message(content, tokens)
        return llm

    return factory


@pytest.fixture
def mock_llm(make_llm: Callable[..., Mock]) -> Mock:
    """Create a mock LLM instance."""
    return make_llm("ok")


@pytest.fixture
def stage_llms(make_llm: Callable[..., Mock]) -> dict[str, Mock]:
    """One mock LLM per LLM-backed stage, answering with sample data."""
    return {
        "router": make_llm(sample_intent_json(), tokens=100),
        "analyst": make_llm(sample_swot_json(), tokens=300),
        "reporter": make_llm(sample_report(), tokens=200),
        "social": make_llm("Acme Corp is leading the market. #strategy", tokens=50),
        "chat": make_llm("Pricing pressure is the most urgent threat.", tokens=40),
    }


@pytest.fixture
def search_tool() -> Mock:
    """Search tool returning three sources, one of them duplicated."""
    return Mock(return_value=[
        {"url": "https://acme.example.com/about"},
        {"url": "https://news.example.com/acme"},
        {"url": "https://acme.example.com/about"},
        {"url": "ftp://files.example.com/acme"},
    ])


@pytest.fixture
def fetch_tool() -> Mock:
    """Fetch tool returning page text for any URL."""
    return Mock(side_effect=lambda url: f"Acme Corp page content from {url}")


@pytest.fixture
def engine(
    stage_llms: dict[str, Mock],
    search_tool: Mock,
    fetch_tool: Mock,
) -> Iterator[WorkflowEngine]:
    """Engine wired with mock LLMs and tools."""
    workflow_engine = WorkflowEngine.from_llm(
        stage_llms["router"],
        search_tool=search_tool,
        fetch_tool=fetch_tool,
        agent_llms=stage_llms,
        config=get_config(),
    )
    yield workflow_engine
    workflow_engine.shutdown(wait=True)
