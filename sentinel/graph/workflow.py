"""LangGraph pipeline builder for the analysis workflow.

This module builds the StateGraph that runs the five stages in their fixed
order. After every stage a conditional edge ends the run when the stage
failed or when the engine asks it to stop (cancellation or timeout).
"""

import logging
from typing import Any, Callable, Mapping, Optional

from langgraph.graph import END, StateGraph

from sentinel.agents.base_agent import StageExecutor
from sentinel.graph.nodes.stage_node import ContextFactory, create_stage_node
from sentinel.graph.state import STAGE_ORDER, AgentRole, AgentState, WorkflowStatus

logger = logging.getLogger(__name__)

StopCheck = Callable[[AgentState], bool]


def node_name(role: AgentRole) -> str:
    """Return the graph node name for a stage."""
    return role.value.lower()


def create_pipeline(
    executors: Mapping[AgentRole, StageExecutor],
    context_factory: ContextFactory,
    should_stop: Optional[StopCheck] = None,
) -> Any:
    """Create the compiled pipeline graph.

    The graph follows this flow, ending early after any stage whose state
    is failed or for which ``should_stop`` returns True:
    1. router: classifies intent
    2. hunter: discovers sources
    3. scraper: extracts content
    4. analyst: produces the SWOT analysis
    5. reporter: writes the final report

    Args:
        executors: One executor per AgentRole
        context_factory: Builds the StageContext for each stage invocation
        should_stop: Called between stages with the current state

    Returns:
        Compiled StateGraph ready for execution

    Raises:
        ValueError: If an executor is missing or registered under the wrong role
    """
    missing = [role.value for role in STAGE_ORDER if role not in executors]
    if missing:
        raise ValueError(f"Missing stage executors: {', '.join(missing)}")
    for role, executor in executors.items():
        if executor.role != role:
            raise ValueError(
                f"Executor {executor.name} implements {executor.role.value}, "
                f"registered as {role.value}"
            )

    graph = StateGraph(AgentState)

    for role in STAGE_ORDER:
        graph.add_node(node_name(role), create_stage_node(executors[role], context_factory))

    graph.set_entry_point(node_name(STAGE_ORDER[0]))

    for current, following in zip(STAGE_ORDER, STAGE_ORDER[1:]):
        next_node = node_name(following)
        graph.add_conditional_edges(
            node_name(current),
            _make_router(next_node, should_stop),
            {next_node: next_node, END: END},
        )

    graph.add_edge(node_name(STAGE_ORDER[-1]), END)

    logger.info("Pipeline graph built successfully")
    return graph.compile()


def _make_router(
    next_node: str,
    should_stop: Optional[StopCheck],
) -> Callable[[AgentState], str]:
    def route(state: AgentState) -> str:
        return _route_after_stage(state, next_node, should_stop)

    return route


def _route_after_stage(
    state: AgentState,
    next_node: str,
    should_stop: Optional[StopCheck],
) -> str:
    """Decide whether the run continues with ``next_node``.

    Args:
        state: State after the stage that just ran
        next_node: Node of the following stage
        should_stop: Engine stop check (cancellation, timeout)

    Returns:
        ``next_node`` or END
    """
    if state.get("status") == WorkflowStatus.FAILED:
        logger.info(f"Stage {state.get('current_agent')} failed, ending workflow")
        return END
    if should_stop is not None and should_stop(state):
        logger.info(f"Workflow {state.get('workflow_id')} stopped before {next_node}")
        return END
    return next_node
