"""Pydantic models for analysis results, comparisons and history queries."""

from sentinel.models.comparison_model import (
    ComparisonResult,
    Contender,
    MetricComparison,
)
from sentinel.models.history_query import ALL_TYPES, HistoryFilter, SortOrder
from sentinel.models.swot_model import (
    SCORE_METRICS,
    StrategicScores,
    SWOTAnalysis,
    clamp_score,
    scores_from_state,
)

__all__ = [
    "ALL_TYPES",
    "ComparisonResult",
    "Contender",
    "HistoryFilter",
    "MetricComparison",
    "SCORE_METRICS",
    "SortOrder",
    "StrategicScores",
    "SWOTAnalysis",
    "clamp_score",
    "scores_from_state",
]
