"""SWOT analysis and strategic score models.

This module defines the SWOTAnalysis and StrategicScores Pydantic models
produced by the Analyst stage and consumed by the report, comparison and
chat components.

Example:
    ```python
    from sentinel.models.swot_model import SWOTAnalysis

    swot = SWOTAnalysis(
        strengths=["Strong brand"],
        weaknesses=["High prices"],
        opportunities=["Emerging markets"],
        threats=["New entrants"],
        scores={"innovation": 72, "market_share": 130},
    )
    swot.scores.market_share  # 100, clamped
    ```
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

# Metric key -> display label, in radar chart order
SCORE_METRICS: dict[str, str] = {
    "innovation": "Innovation",
    "market_share": "Market Share",
    "pricing_power": "Pricing Power",
    "brand_reputation": "Brand Reputation",
    "velocity": "Velocity",
}

MIN_SCORE = 0
MAX_SCORE = 100


def clamp_score(value: Any) -> int:
    """Coerce a raw score into an integer in [0, 100].

    Missing or non-numeric values count as 0.

    Args:
        value: Raw score (int, float, numeric string or None)

    Returns:
        Integer score clamped to the valid range
    """
    if value is None or isinstance(value, bool):
        return MIN_SCORE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return MIN_SCORE
    if number != number:  # NaN
        return MIN_SCORE
    return int(round(min(max(number, MIN_SCORE), MAX_SCORE)))


class StrategicScores(BaseModel):
    """Five strategic metrics, each an integer in [0, 100].

    Out-of-range values are clamped rather than rejected: LLM output is
    routinely a few points outside the scale.
    """

    model_config = {"extra": "ignore"}

    innovation: int = Field(default=0, description="Product and technology innovation")
    market_share: int = Field(default=0, description="Relative market share")
    pricing_power: int = Field(default=0, description="Ability to sustain pricing")
    brand_reputation: int = Field(default=0, description="Brand strength and reputation")
    velocity: int = Field(default=0, description="Speed of execution and growth")

    @field_validator(*SCORE_METRICS, mode="before")
    @classmethod
    def clamp(cls, value: Any) -> int:
        return clamp_score(value)

    def positioning_label(self) -> str:
        """Classify the company's market position from its scores.

        Returns:
            One of "Dominant Market Leader", "High-Growth Disruptor",
            "Cost-Competitor" or "Established Player"
        """
        if self.market_share > 75:
            return "Dominant Market Leader"
        if self.innovation > 80:
            return "High-Growth Disruptor"
        if self.pricing_power < 40:
            return "Cost-Competitor"
        return "Established Player"


class SWOTAnalysis(BaseModel):
    """Structured SWOT output written once by the Analyst stage.

    Attributes:
        strengths: Ordered list of strengths
        weaknesses: Ordered list of weaknesses
        opportunities: Ordered list of opportunities
        threats: Ordered list of threats
        scores: Strategic scores for the five metrics
    """

    model_config = {"extra": "ignore"}

    strengths: list[str] = Field(default_factory=list, description="Company strengths")
    weaknesses: list[str] = Field(default_factory=list, description="Company weaknesses")
    opportunities: list[str] = Field(default_factory=list, description="Market opportunities")
    threats: list[str] = Field(default_factory=list, description="Market threats")
    scores: StrategicScores = Field(
        default_factory=StrategicScores,
        description="Strategic scores",
    )

    @field_validator("strengths", "weaknesses", "opportunities", "threats", mode="before")
    @classmethod
    def validate_swot_items(cls, value: Any) -> list[str]:
        """Validate and clean SWOT list items.

        Args:
            value: Raw list (or None) of SWOT items

        Returns:
            List of stripped, non-empty item strings
        """
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [str(item).strip() for item in value if str(item).strip()]

    @field_validator("scores", mode="before")
    @classmethod
    def default_scores(cls, value: Any) -> Any:
        return value if value is not None else {}

    def is_empty(self) -> bool:
        """Return True when no SWOT category has any item."""
        return not (self.strengths or self.weaknesses or self.opportunities or self.threats)


def scores_from_state(swot_analysis: dict[str, Any] | None) -> StrategicScores:
    """Read clamped scores from a stored ``swot_analysis`` dictionary.

    Args:
        swot_analysis: SWOT dictionary as stored in AgentState, or None

    Returns:
        StrategicScores with missing metrics defaulted to 0
    """
    raw_scores = (swot_analysis or {}).get("scores") or {}
    return StrategicScores(**{key: raw_scores.get(key) for key in SCORE_METRICS})
