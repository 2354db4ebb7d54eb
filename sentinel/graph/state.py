"""Workflow state definition for the analysis pipeline.

AgentState is the single record carried through the Router, Hunter,
Scraper, Analyst and Reporter stages. Each stage owns exactly one output
field; the engine owns everything else.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, TypedDict


class AgentRole(str, Enum):
    """Pipeline stage identifiers, in execution order."""

    ROUTER = "ROUTER"
    HUNTER = "HUNTER"
    SCRAPER = "SCRAPER"
    ANALYST = "ANALYST"
    REPORTER = "REPORTER"


class WorkflowStatus(str, Enum):
    """Lifecycle status of a workflow run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


STAGE_ORDER: tuple[AgentRole, ...] = (
    AgentRole.ROUTER,
    AgentRole.HUNTER,
    AgentRole.SCRAPER,
    AgentRole.ANALYST,
    AgentRole.REPORTER,
)

TERMINAL_STATUSES = frozenset({WorkflowStatus.COMPLETED, WorkflowStatus.FAILED})

DEFAULT_ANALYSIS_TYPE = "General"

CANCELLED_ERROR = "cancelled"
TIMED_OUT_ERROR = "timed out"

# Field written by each stage. Any other change made by a stage is rejected.
STAGE_OWNED_FIELDS: dict[AgentRole, str] = {
    AgentRole.ROUTER: "intent",
    AgentRole.HUNTER: "discovered_urls",
    AgentRole.SCRAPER: "extracted_content",
    AgentRole.ANALYST: "swot_analysis",
    AgentRole.REPORTER: "final_report",
}

# Owned fields a stage may only extend, never rewrite
APPEND_ONLY_FIELDS = frozenset({"discovered_urls", "extracted_content"})


class AgentState(TypedDict, total=False):
    """State of a single analysis run.

    Attributes:
        workflow_id: Unique identifier of the run
        target_company: Company under analysis
        analysis_type: Category label, "General" when not supplied
        current_agent: Stage currently executing, or the last one executed
        status: Lifecycle status
        intent: Router classification (category, focus_areas, search_queries)
        discovered_urls: Source URLs found by the Hunter stage
        extracted_content: Text extracted by the Scraper stage
        swot_analysis: Structured SWOT produced by the Analyst stage
        final_report: Markdown report produced by the Reporter stage
        social_post: Short post derived from the report after completion
        timestamp: ISO-8601 UTC creation time
        error: Failure message, "cancelled" or "timed out" when failed
        report_issue: Non-fatal report generation issue, if any
        total_cost: Accumulated USD cost of the run
        total_tokens: Accumulated token count of the run
    """

    workflow_id: str
    target_company: str
    analysis_type: str
    current_agent: AgentRole
    status: WorkflowStatus
    intent: Optional[dict[str, Any]]
    discovered_urls: list[str]
    extracted_content: str
    swot_analysis: Optional[dict[str, Any]]
    final_report: Optional[str]
    social_post: Optional[str]
    timestamp: str
    error: Optional[str]
    report_issue: Optional[str]
    total_cost: float
    total_tokens: int


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def create_initial_state(
    target_company: str,
    analysis_type: Optional[str] = None,
    workflow_id: Optional[str] = None,
) -> AgentState:
    """Create a pending AgentState for a new run.

    Args:
        target_company: Sanitized company name
        analysis_type: Category label, defaults to "General"
        workflow_id: Explicit identifier, generated when omitted

    Returns:
        New AgentState positioned at the Router stage
    """
    return AgentState(
        workflow_id=workflow_id or uuid.uuid4().hex,
        target_company=target_company,
        analysis_type=analysis_type or DEFAULT_ANALYSIS_TYPE,
        current_agent=AgentRole.ROUTER,
        status=WorkflowStatus.PENDING,
        intent=None,
        discovered_urls=[],
        extracted_content="",
        swot_analysis=None,
        final_report=None,
        social_post=None,
        timestamp=utc_timestamp(),
        error=None,
        report_issue=None,
        total_cost=0.0,
        total_tokens=0,
    )


def is_terminal(state: AgentState) -> bool:
    """Return True when the run has completed or failed."""
    return state.get("status") in TERMINAL_STATUSES
