"""Tests for the follow-up analyst chat and the social post agent."""

from typing import Callable
from unittest.mock import Mock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from sentinel.agents.chat_agent import CONNECTION_ERROR_REPLY, EMPTY_REPLY, AnalystChat, build_context
from sentinel.agents.context import StageContext
from sentinel.agents.social_agent import MAX_POST_LENGTH, SocialPostAgent
from sentinel.config import Config
from sentinel.exceptions.invalid_input import InvalidInputError
from sentinel.exceptions.workflow_error import WorkflowError
from sentinel.graph.state import AgentRole
from sentinel.graph.state_utils import update_state
from sentinel.utils.usage import UsageAccumulator
from tests.fixtures.sample_data import ai_message, make_record


class TestBuildContext:
    """Tests for the chat context."""

    def test_context_contains_run_outputs(self) -> None:
        """Test company, type, data, SWOT and report are included."""
        record = update_state(
            make_record("Acme Corp", "Pricing"),
            extracted_content="SOURCE: https://a.example.com\nPrices rose.",
        )

        context = build_context(record)

        assert context.startswith("COMPANY: Acme Corp\nANALYSIS TYPE: Pricing\n")
        assert "Prices rose." in context
        assert '"Strong brand"' in context
        assert "# Acme Corp Competitive Report" in context


class TestAnalystChat:
    """Tests for AnalystChat.ask."""

    def test_answer_and_history(self, make_llm: Callable[..., Mock]) -> None:
        """Test answers are returned and kept in the history."""
        llm = make_llm("Pricing pressure.", tokens=40)
        chat = AnalystChat(llm, make_record("Acme Corp", workflow_id="wf"))

        answer = chat.ask("  Which threat is most urgent? ")

        assert answer == "Pricing pressure."
        assert chat.history == [
            ("user", "Which threat is most urgent?"),
            ("model", "Pricing pressure."),
        ]

    def test_history_is_sent_with_later_questions(self, make_llm: Callable[..., Mock]) -> None:
        """Test the system prompt and earlier turns precede a new question."""
        llm = make_llm("Answer.")
        chat = AnalystChat(llm, make_record("Acme Corp"))
        chat.ask("First?")

        chat.ask("Second?")

        messages = llm.invoke.call_args.args[0]
        assert isinstance(messages[0], SystemMessage)
        assert "COMPANY: Acme Corp" in messages[0].content
        assert [type(message) for message in messages[1:]] == [HumanMessage, AIMessage, HumanMessage]
        assert messages[-1].content == "Second?"

    def test_llm_failure_returns_connection_error(self, make_llm: Callable[..., Mock]) -> None:
        """Test failures answer with a fixed message and keep no history."""
        llm = make_llm()
        llm.invoke.side_effect = ConnectionError("unreachable")
        chat = AnalystChat(llm, make_record("Acme Corp"))

        assert chat.ask("Hello?") == CONNECTION_ERROR_REPLY
        assert chat.history == []

    def test_empty_answer(self, make_llm: Callable[..., Mock]) -> None:
        """Test an empty answer gets the fallback reply."""
        chat = AnalystChat(make_llm("   "), make_record("Acme Corp"))

        assert chat.ask("Hello?") == EMPTY_REPLY
        assert chat.history == []

    def test_blank_question_rejected(self, make_llm: Callable[..., Mock]) -> None:
        """Test blank questions are rejected without an LLM call."""
        llm = make_llm("Answer.")
        chat = AnalystChat(llm, make_record("Acme Corp"))

        with pytest.raises(InvalidInputError):
            chat.ask("   ")
        llm.invoke.assert_not_called()

    def test_usage_is_recorded(self, make_llm: Callable[..., Mock]) -> None:
        """Test chat tokens are added to the usage totals."""
        usage = UsageAccumulator()
        chat = AnalystChat(make_llm("Answer.", tokens=40), make_record("Acme Corp"), usage=usage, cost_per_1k_tokens=1.0)

        chat.ask("Question?")

        stats = usage.stats()
        assert stats.total_tokens == 40
        assert stats.total_cost == pytest.approx(0.04)
        assert stats.total_workflows == 0

    def test_retries_follow_given_settings(self, make_llm: Callable[..., Mock]) -> None:
        """Test the chat retries with the policy of the configuration it was given."""
        llm = make_llm()
        llm.invoke.side_effect = [ConnectionError("reset"), ai_message("Recovered.")]
        settings = Config(llm_retry_attempts=2, llm_retry_backoff_min=0.01, llm_retry_backoff_max=0.01)
        chat = AnalystChat(llm, make_record("Acme Corp"), settings=settings)

        assert chat.ask("Hello?") == "Recovered."
        assert llm.invoke.call_count == 2

    def test_requires_chat_model(self) -> None:
        """Test a real chat model is required."""
        with pytest.raises(TypeError):
            AnalystChat("not a model", make_record("Acme Corp"))  # type: ignore[arg-type]


class TestSocialPostAgent:
    """Tests for SocialPostAgent."""

    def test_generate_post(self, make_llm: Callable[..., Mock]) -> None:
        """Test the post is returned and its usage reported."""
        context = StageContext("wf", AgentRole.REPORTER, cost_per_1k_tokens=1.0)
        agent = SocialPostAgent(make_llm("Acme leads. #strategy", tokens=30))

        post = agent.generate(make_record("Acme Corp"), context)

        assert post == "Acme leads. #strategy"
        assert context.tokens == 30

    def test_post_is_capped(self, make_llm: Callable[..., Mock]) -> None:
        """Test overly long posts are truncated."""
        agent = SocialPostAgent(make_llm("x" * (MAX_POST_LENGTH + 100)))

        assert len(agent.generate(make_record("Acme Corp"))) == MAX_POST_LENGTH

    def test_requires_report(self, make_llm: Callable[..., Mock]) -> None:
        """Test records without a report are rejected."""
        llm = make_llm("post")
        record = update_state(make_record("Acme Corp"), final_report=None)

        with pytest.raises(WorkflowError):
            SocialPostAgent(llm).generate(record)
        llm.invoke.assert_not_called()

    def test_empty_post_rejected(self, make_llm: Callable[..., Mock]) -> None:
        """Test an empty LLM answer is an error."""
        with pytest.raises(WorkflowError):
            SocialPostAgent(make_llm("")).generate(make_record("Acme Corp"))
