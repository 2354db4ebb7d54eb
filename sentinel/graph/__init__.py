"""Graph workflow components for the analysis pipeline.

This package contains:
- state.py: AgentState TypedDict, stage roles and statuses
- state_utils.py: immutable state updates and stage ownership checks
- workflow.py: LangGraph pipeline builder
- nodes/: node wrappers that run one stage each
"""
