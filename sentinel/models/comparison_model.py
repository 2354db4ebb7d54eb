"""Comparison result models for head-to-head analysis.

This module defines the models returned by the ComparisonEngine when two
completed analyses are compared metric by metric.
"""

from typing import Literal

from pydantic import BaseModel, Field

Advantage = Literal["a", "b", "even"]


class MetricComparison(BaseModel):
    """Comparison of a single strategic metric.

    Attributes:
        metric: Metric key (e.g., "market_share")
        label: Display label (e.g., "Market Share")
        value_a: Clamped score of contender A
        value_b: Clamped score of contender B
        difference: Signed difference ``value_a - value_b``
        advantage: "a" or "b" for the strictly greater side, "even" on ties
    """

    model_config = {"frozen": True}

    metric: str
    label: str
    value_a: int = Field(ge=0, le=100)
    value_b: int = Field(ge=0, le=100)
    difference: int
    advantage: Advantage


class Contender(BaseModel):
    """One side of a comparison."""

    model_config = {"frozen": True}

    workflow_id: str
    target_company: str
    analysis_type: str
    positioning: str
    top_strengths: list[str] = Field(default_factory=list)


class ComparisonResult(BaseModel):
    """Head-to-head comparison of two analyses.

    Attributes:
        contender_a: First record
        contender_b: Second record
        metrics: One MetricComparison per strategic metric, in metric order
        summary: One-line market share advantage summary
    """

    model_config = {"frozen": True}

    contender_a: Contender
    contender_b: Contender
    metrics: list[MetricComparison]
    summary: str

    def metric(self, key: str) -> MetricComparison:
        """Return the comparison for a metric key.

        Raises:
            KeyError: If the metric is unknown
        """
        for item in self.metrics:
            if item.metric == key:
                return item
        raise KeyError(key)

    def advantages(self, side: Advantage) -> list[str]:
        """Return the metric keys on which ``side`` holds the advantage."""
        return [item.metric for item in self.metrics if item.advantage == side]
