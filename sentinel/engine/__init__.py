"""Workflow orchestration: engine, single-flight locking and comparisons."""

from sentinel.engine.comparison import ComparisonEngine
from sentinel.engine.workflow_engine import WorkflowEngine

__all__ = ["ComparisonEngine", "WorkflowEngine"]
