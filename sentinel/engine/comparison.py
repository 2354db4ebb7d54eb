"""Head-to-head comparison of two finished analyses."""

import logging

from sentinel.exceptions.comparison_error import InvalidComparisonSetError
from sentinel.graph.state import DEFAULT_ANALYSIS_TYPE, AgentState, is_terminal
from sentinel.models.comparison_model import ComparisonResult, Contender, MetricComparison
from sentinel.models.swot_model import SCORE_METRICS, StrategicScores, scores_from_state

logger = logging.getLogger(__name__)

TOP_STRENGTHS = 3


class ComparisonEngine:
    """Derives per-metric score deltas between two records.

    Scores are read with missing metrics as 0 and clamped to [0, 100].
    The advantage on a metric goes to the strictly greater side; equal
    scores are "even".
    """

    def compare(self, *records: AgentState) -> ComparisonResult:
        """Compare exactly two terminal records.

        Args:
            *records: The two records, A first

        Returns:
            ComparisonResult with one MetricComparison per metric

        Raises:
            InvalidComparisonSetError: Unless exactly two terminal records
                with distinct workflow ids are given
        """
        self._validate(records)
        record_a, record_b = records
        scores_a = scores_from_state(record_a.get("swot_analysis"))
        scores_b = scores_from_state(record_b.get("swot_analysis"))

        metrics = []
        for key, label in SCORE_METRICS.items():
            value_a = getattr(scores_a, key)
            value_b = getattr(scores_b, key)
            metrics.append(
                MetricComparison(
                    metric=key,
                    label=label,
                    value_a=value_a,
                    value_b=value_b,
                    difference=value_a - value_b,
                    advantage=_advantage(value_a, value_b),
                )
            )

        contender_a = _contender(record_a, scores_a)
        contender_b = _contender(record_b, scores_b)
        result = ComparisonResult(
            contender_a=contender_a,
            contender_b=contender_b,
            metrics=metrics,
            summary=_market_share_summary(contender_a, contender_b, scores_a, scores_b),
        )
        logger.debug(
            f"Compared {contender_a.target_company} with {contender_b.target_company}: {result.summary}"
        )
        return result

    @staticmethod
    def _validate(records: tuple[AgentState, ...]) -> None:
        if len(records) != 2:
            raise InvalidComparisonSetError(
                f"Comparison needs exactly two records, got {len(records)}",
                context={"count": len(records)},
            )
        ids = [record.get("workflow_id") for record in records]
        if not all(ids) or ids[0] == ids[1]:
            raise InvalidComparisonSetError(
                "Comparison needs two distinct records",
                context={"workflow_ids": ids},
            )
        not_terminal = [record.get("workflow_id") for record in records if not is_terminal(record)]
        if not_terminal:
            raise InvalidComparisonSetError(
                "Only completed or failed workflows can be compared",
                context={"workflow_ids": not_terminal},
            )


def _advantage(value_a: int, value_b: int) -> str:
    if value_a > value_b:
        return "a"
    if value_b > value_a:
        return "b"
    return "even"


def _contender(record: AgentState, scores: StrategicScores) -> Contender:
    swot = record.get("swot_analysis") or {}
    return Contender(
        workflow_id=record["workflow_id"],
        target_company=record.get("target_company") or "",
        analysis_type=record.get("analysis_type") or DEFAULT_ANALYSIS_TYPE,
        positioning=scores.positioning_label(),
        top_strengths=list(swot.get("strengths") or [])[:TOP_STRENGTHS],
    )


def _market_share_summary(
    contender_a: Contender,
    contender_b: Contender,
    scores_a: StrategicScores,
    scores_b: StrategicScores,
) -> str:
    difference = scores_a.market_share - scores_b.market_share
    if difference == 0:
        return (
            f"{contender_a.target_company} and {contender_b.target_company} "
            f"are even on market share."
        )
    leader = contender_a if difference > 0 else contender_b
    return f"{leader.target_company} leads with {abs(difference)} point market share advantage."
