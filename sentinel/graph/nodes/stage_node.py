"""Stage node: runs one StageExecutor inside the pipeline graph."""

import logging
from typing import Callable

from sentinel.agents.base_agent import StageExecutor
from sentinel.agents.context import StageContext
from sentinel.exceptions.stage_failure import StageFailure
from sentinel.graph.nodes.base_node import stage_error_handler
from sentinel.graph.state import AgentRole, AgentState
from sentinel.graph.state_utils import check_stage_output, update_state

logger = logging.getLogger(__name__)

ContextFactory = Callable[[AgentState, AgentRole], StageContext]


def create_stage_node(
    executor: StageExecutor,
    context_factory: ContextFactory,
) -> Callable[[AgentState], AgentState]:
    """Create the graph node for a stage executor.

    The node advances ``current_agent`` to the executor's role, runs the
    executor with a fresh StageContext, rejects output that touches fields
    the stage does not own and adds the stage's cost and tokens to the run
    totals, whether the stage succeeded or failed.

    Args:
        executor: Stage executor to run
        context_factory: Builds the StageContext for an invocation

    Returns:
        Node function for StateGraph.add_node
    """
    role = executor.role

    @stage_error_handler(role)
    def run_stage(state: AgentState, context: StageContext) -> AgentState:
        result = executor.execute(state, context)
        if not isinstance(result, dict):
            raise StageFailure(
                f"{executor.name} returned {type(result).__name__} instead of a state",
                stage=role.value,
            )
        check_stage_output(role, state, result)
        return result

    def stage_node(state: AgentState) -> AgentState:
        logger.info(f"Running stage {role.value} for workflow {state.get('workflow_id')}")
        entered = update_state(state, current_agent=role)
        context = context_factory(entered, role)
        result = run_stage(entered, context)
        return update_state(
            result,
            total_cost=float(entered.get("total_cost") or 0.0) + context.cost,
            total_tokens=int(entered.get("total_tokens") or 0) + context.tokens,
        )

    stage_node.__name__ = f"{role.value.lower()}_node"
    return stage_node
