"""Tests for state utility functions.

This module contains unit tests for immutable state updates and the
stage ownership check.
"""

import pytest

from sentinel.exceptions.stage_failure import StageFailure
from sentinel.graph.state import AgentRole, create_initial_state
from sentinel.graph.state_utils import (
    changed_fields,
    check_stage_output,
    snapshot,
    update_state,
)


class TestUpdateState:
    """Tests for update_state and snapshot."""

    def test_update_state_does_not_mutate_original(self) -> None:
        """Test the original state is left untouched."""
        state = create_initial_state("Acme Corp")
        new_state = update_state(state, discovered_urls=["https://a.example.com"])

        assert new_state is not state
        assert state["discovered_urls"] == []
        assert new_state["discovered_urls"] == ["https://a.example.com"]

    def test_update_state_deep_copies_values(self) -> None:
        """Test later changes to an update value do not leak into the state."""
        urls = ["https://a.example.com"]
        new_state = update_state(create_initial_state("Acme Corp"), discovered_urls=urls)
        urls.append("https://b.example.com")

        assert new_state["discovered_urls"] == ["https://a.example.com"]

    def test_snapshot_is_independent(self) -> None:
        """Test mutating a snapshot does not affect the source."""
        state = update_state(create_initial_state("Acme Corp"), intent={"category": "General"})
        copy = snapshot(state)
        copy["intent"]["category"] = "Changed"

        assert state["intent"]["category"] == "General"

    def test_changed_fields(self) -> None:
        """Test changed_fields reports differing keys."""
        state = create_initial_state("Acme Corp")
        after = update_state(state, final_report="Report", total_tokens=5)

        assert changed_fields(state, after) == {"final_report", "total_tokens"}


class TestCheckStageOutput:
    """Tests for check_stage_output."""

    def test_owned_field_change_is_accepted(self) -> None:
        """Test a stage may write its own field."""
        state = create_initial_state("Acme Corp")
        after = update_state(state, intent={"category": "General"})

        check_stage_output(AgentRole.ROUTER, state, after)

    def test_foreign_field_change_is_rejected(self) -> None:
        """Test a stage writing another stage's field fails."""
        state = create_initial_state("Acme Corp")
        after = update_state(state, final_report="Premature report")

        with pytest.raises(StageFailure) as exc_info:
            check_stage_output(AgentRole.HUNTER, state, after)

        assert exc_info.value.stage == "HUNTER"
        assert "final_report" in str(exc_info.value)

    def test_append_only_field_may_grow(self) -> None:
        """Test appending to discovered_urls is accepted."""
        state = update_state(create_initial_state("Acme Corp"), discovered_urls=["https://a.example.com"])
        after = update_state(state, discovered_urls=["https://a.example.com", "https://b.example.com"])

        check_stage_output(AgentRole.HUNTER, state, after)

    def test_append_only_field_cannot_be_rewritten(self) -> None:
        """Test replacing existing content is rejected."""
        state = update_state(create_initial_state("Acme Corp"), extracted_content="SOURCE: a\ntext")
        after = update_state(state, extracted_content="SOURCE: b\nother")

        with pytest.raises(StageFailure):
            check_stage_output(AgentRole.SCRAPER, state, after)
