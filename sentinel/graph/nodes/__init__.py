"""Node wrappers that run one pipeline stage each.

- stage_error_handler: converts stage exceptions into a failed state
- create_stage_node: builds the LangGraph node for a StageExecutor
"""

from sentinel.graph.nodes.base_node import stage_error_handler
from sentinel.graph.nodes.stage_node import create_stage_node

__all__ = [
    "create_stage_node",
    "stage_error_handler",
]
