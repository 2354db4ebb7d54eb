"""Tests for stage node error handling and the stage node wrapper.

This module contains unit tests for the stage_error_handler decorator
and create_stage_node, which together guarantee that stage failures
become failed states instead of exceptions.
"""

from typing import Any

import pytest

from sentinel.agents.base_agent import StageExecutor
from sentinel.agents.context import StageContext
from sentinel.exceptions.collector_error import CollectorError
from sentinel.exceptions.stage_failure import StageFailure
from sentinel.graph.nodes import create_stage_node, stage_error_handler
from sentinel.graph.state import AgentRole, AgentState, WorkflowStatus, create_initial_state
from sentinel.graph.state_utils import update_state
from sentinel.utils.event_log import EventLog


class ScriptedHunter(StageExecutor):
    """Hunter stand-in whose behavior is set per test."""

    def __init__(self, outcome: Any, tokens: int = 0) -> None:
        super().__init__()
        self.outcome = outcome
        self.tokens = tokens

    def execute(self, state: AgentState, context: StageContext) -> AgentState:
        if self.tokens:
            context.add_usage(self.tokens)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        if callable(self.outcome):
            return self.outcome(state)
        return self.outcome

    @property
    def role(self) -> AgentRole:
        return AgentRole.HUNTER


class TestStageErrorHandler:
    """Tests for stage_error_handler decorator."""

    def test_workflow_error_becomes_failed_state(self) -> None:
        """Test engine errors are converted into a failed state."""
        event_log = EventLog()
        context = StageContext("wf", AgentRole.HUNTER, event_log=event_log)

        @stage_error_handler(AgentRole.HUNTER)
        def node(state: AgentState, context: StageContext) -> AgentState:
            raise CollectorError("Search quota exhausted")

        state = create_initial_state("Acme Corp")
        result = node(state, context)

        assert result is not state
        assert result["status"] == WorkflowStatus.FAILED
        assert result["current_agent"] == AgentRole.HUNTER
        assert result["error"] == "HUNTER failed: Search quota exhausted"
        assert state["status"] == WorkflowStatus.PENDING
        assert event_log.recent()[0].message == "HUNTER failed: Search quota exhausted"

    def test_unexpected_exception_includes_type(self) -> None:
        """Test unexpected exceptions are reported with their class name."""
        @stage_error_handler(AgentRole.ANALYST)
        def node(state: AgentState, context: StageContext) -> AgentState:
            raise KeyError("scores")

        result = node(create_initial_state("Acme Corp"), StageContext("wf", AgentRole.ANALYST))

        assert result["error"].startswith("ANALYST failed: Unexpected error (KeyError)")

    def test_success_passes_through(self) -> None:
        """Test successful results are returned unchanged."""
        @stage_error_handler(AgentRole.ROUTER)
        def node(state: AgentState, context: StageContext) -> AgentState:
            return update_state(state, intent={"category": "General"})

        result = node(create_initial_state("Acme Corp"), StageContext("wf", AgentRole.ROUTER))

        assert result["intent"] == {"category": "General"}
        assert result["error"] is None


class TestCreateStageNode:
    """Tests for create_stage_node."""

    def _node(self, executor: StageExecutor, contexts: list[StageContext] | None = None) -> Any:
        def factory(state: AgentState, role: AgentRole) -> StageContext:
            context = StageContext(state.get("workflow_id"), role, cost_per_1k_tokens=1.0)
            if contexts is not None:
                contexts.append(context)
            return context

        return create_stage_node(executor, factory)

    def test_node_advances_current_agent_and_adds_usage(self) -> None:
        """Test the node sets the stage and folds usage into the totals."""
        executor = ScriptedHunter(
            lambda state: update_state(state, discovered_urls=["https://a.example.com"]),
            tokens=500,
        )
        state = update_state(create_initial_state("Acme Corp"), total_tokens=100, total_cost=0.1)

        result = self._node(executor)(state)

        assert result["current_agent"] == AgentRole.HUNTER
        assert result["discovered_urls"] == ["https://a.example.com"]
        assert result["total_tokens"] == 600
        assert result["total_cost"] == pytest.approx(0.6)

    def test_node_name(self) -> None:
        """Test node functions are named after their stage."""
        assert self._node(ScriptedHunter({})).__name__ == "hunter_node"

    def test_failed_stage_keeps_usage(self) -> None:
        """Test usage reported before a failure is still charged."""
        executor = ScriptedHunter(StageFailure("No sources discovered", stage="HUNTER"), tokens=200)

        result = self._node(executor)(create_initial_state("Acme Corp"))

        assert result["status"] == WorkflowStatus.FAILED
        assert result["error"] == "HUNTER failed: No sources discovered"
        assert result["total_tokens"] == 200

    def test_foreign_field_write_fails_stage(self) -> None:
        """Test writing another stage's field fails the run."""
        executor = ScriptedHunter(lambda state: update_state(state, final_report="Too early"))

        result = self._node(executor)(create_initial_state("Acme Corp"))

        assert result["status"] == WorkflowStatus.FAILED
        assert "final_report" in result["error"]
        assert result["final_report"] is None

    def test_non_state_result_fails_stage(self) -> None:
        """Test returning something other than a state fails the run."""
        result = self._node(ScriptedHunter("not a state"))(create_initial_state("Acme Corp"))

        assert result["status"] == WorkflowStatus.FAILED
        assert "instead of a state" in result["error"]

    def test_context_is_created_per_invocation(self) -> None:
        """Test every run of the node gets a fresh context."""
        contexts: list[StageContext] = []
        node = self._node(ScriptedHunter(lambda state: state), contexts)

        node(create_initial_state("Acme Corp"))
        node(create_initial_state("Globex"))

        assert len(contexts) == 2
        assert contexts[0] is not contexts[1]
        assert contexts[0].agent == "HUNTER"
