"""State utility functions for immutable state updates.

Stages and the engine never mutate an AgentState in place: every change
produces a deep copy so that snapshots handed to observers stay stable.
"""

import copy
import logging
from typing import Any

from sentinel.exceptions.stage_failure import StageFailure
from sentinel.graph.state import (
    APPEND_ONLY_FIELDS,
    STAGE_OWNED_FIELDS,
    AgentRole,
    AgentState,
)

logger = logging.getLogger(__name__)


def update_state(state: AgentState, **updates: Any) -> AgentState:
    """Create new state with updates, ensuring immutability.

    Args:
        state: Current state to update
        **updates: Fields to update. Values are deep copied before assignment.

    Returns:
        New AgentState with updates applied. The original state
        remains unchanged.
    """
    new_state = copy.deepcopy(state)
    for key, value in updates.items():
        new_state[key] = copy.deepcopy(value)  # type: ignore
    return new_state


def snapshot(state: AgentState) -> AgentState:
    """Return an independent deep copy of a state."""
    return copy.deepcopy(state)


def changed_fields(before: AgentState, after: AgentState) -> set[str]:
    """Return the keys whose values differ between two states."""
    keys = set(before) | set(after)
    return {key for key in keys if before.get(key) != after.get(key)}


def check_stage_output(
    role: AgentRole,
    before: AgentState,
    after: AgentState,
) -> None:
    """Verify that a stage changed only the field it owns.

    Append-only fields must keep their previous value as a prefix.

    Args:
        role: Stage that produced ``after``
        before: State handed to the stage
        after: State returned by the stage

    Raises:
        StageFailure: If the stage touched a field it does not own or
            rewrote an append-only field
    """
    owned = STAGE_OWNED_FIELDS[role]
    foreign = sorted(changed_fields(before, after) - {owned})
    if foreign:
        raise StageFailure(
            f"{role.value} modified fields it does not own: {', '.join(foreign)}",
            stage=role.value,
            context={"fields": foreign},
        )

    if owned in APPEND_ONLY_FIELDS:
        previous = before.get(owned)
        current = after.get(owned)
        if previous and (not current or current[: len(previous)] != previous):
            raise StageFailure(
                f"{role.value} rewrote append-only field {owned}",
                stage=role.value,
                context={"field": owned},
            )
