"""Sample test data fixtures.

This module contains sample LLM responses and run states used in tests
for realistic but anonymized scenarios.
"""

import json
from typing import Any, Optional

from langchain_core.messages import AIMessage

from sentinel.graph.state import AgentRole, AgentState, WorkflowStatus, create_initial_state
from sentinel.graph.state_utils import update_state


def ai_message(content: str, tokens: int = 100) -> AIMessage:
    """Create an LLM response reporting ``tokens`` total tokens."""
    return AIMessage(
        content=content,
        response_metadata={
            "token_usage": {
                "prompt_tokens": tokens // 2,
                "completion_tokens": tokens - tokens // 2,
                "total_tokens": tokens,
            }
        },
    )


def sample_intent_json() -> str:
    """Router response classifying a pricing analysis."""
    return json.dumps({
        "category": "Pricing Strategy",
        "focus_areas": ["pricing tiers", "discounting"],
        "search_queries": ["Acme Corp pricing", "Acme Corp competitors"],
    })


def sample_swot(scores: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """SWOT dictionary as produced by the Analyst stage."""
    return {
        "strengths": ["Strong brand", "Global distribution", "Loyal customers", "Patents"],
        "weaknesses": ["High prices"],
        "opportunities": ["Emerging markets"],
        "threats": ["New entrants"],
        "scores": scores if scores is not None else {
            "innovation": 70,
            "market_share": 60,
            "pricing_power": 55,
            "brand_reputation": 80,
            "velocity": 50,
        },
    }


def sample_swot_json(scores: Optional[dict[str, Any]] = None) -> str:
    """Analyst response wrapped in a markdown fence."""
    return f"```json\n{json.dumps(sample_swot(scores))}\n```"


def sample_report() -> str:
    """Reporter response."""
    return (
        "# Acme Corp Competitive Report\n\n"
        "## Executive Summary\n\n"
        "Acme Corp holds a solid position with a strong brand and global reach."
    )


def make_record(
    target_company: str,
    analysis_type: str = "General",
    scores: Optional[dict[str, Any]] = None,
    timestamp: Optional[str] = None,
    status: WorkflowStatus = WorkflowStatus.COMPLETED,
    workflow_id: Optional[str] = None,
) -> AgentState:
    """Create a terminal history record."""
    state = create_initial_state(target_company, analysis_type, workflow_id=workflow_id)
    updates: dict[str, Any] = {
        "status": status,
        "current_agent": AgentRole.REPORTER,
        "swot_analysis": sample_swot(scores),
        "final_report": sample_report(),
    }
    if timestamp is not None:
        updates["timestamp"] = timestamp
    return update_state(state, **updates)
