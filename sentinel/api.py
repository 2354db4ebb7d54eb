"""Read-only facade over the engine for presentation layers.

SentinelAPI exposes the operations a dashboard needs: run status, the
activity log, usage statistics, history queries and head-to-head
comparisons. None of them mutate engine-owned state.
"""

import logging
from typing import Callable, Optional

from sentinel.engine.comparison import ComparisonEngine
from sentinel.engine.workflow_engine import WorkflowEngine
from sentinel.graph.state import AgentState
from sentinel.models.comparison_model import ComparisonResult
from sentinel.models.history_query import ALL_TYPES, HistoryFilter, SortOrder
from sentinel.utils.event_log import LogEntry
from sentinel.utils.usage import WorkflowStats

logger = logging.getLogger(__name__)


class SentinelAPI:
    """Consumer-facing read API.

    Attributes:
        engine: Engine whose state is exposed
        comparison: Comparison engine used by ``get_comparison``
    """

    def __init__(
        self,
        engine: WorkflowEngine,
        comparison: Optional[ComparisonEngine] = None,
    ) -> None:
        self.engine = engine
        self.comparison = comparison or ComparisonEngine()

    def get_status(self, workflow_id: str) -> AgentState:
        """Return a snapshot of a run.

        Raises:
            NotFoundError: If the workflow id is unknown
        """
        return self.engine.status(workflow_id)

    def stream_logs(
        self,
        limit: Optional[int] = None,
        workflow_id: Optional[str] = None,
    ) -> list[LogEntry]:
        """Return retained log entries, oldest first.

        Args:
            limit: Maximum number of newest entries to return
            workflow_id: Only return entries of this run
        """
        if workflow_id is None:
            return self.engine.event_log.recent(limit)
        entries = [
            entry for entry in self.engine.event_log.recent()
            if entry.workflow_id == workflow_id
        ]
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries

    def subscribe_logs(self, handler: Callable[[LogEntry], None]) -> Callable[[], None]:
        """Register a handler for new log entries; returns the unsubscribe callable."""
        return self.engine.event_log.subscribe(handler)

    def get_stats(self) -> WorkflowStats:
        return self.engine.usage.stats()

    def query_history(
        self,
        search_term: Optional[str] = None,
        analysis_type: Optional[str] = None,
        sort_order: SortOrder | str = SortOrder.NEWEST,
    ) -> list[AgentState]:
        """Return history records matching the filter in the requested order.

        Raises:
            ValueError: If sort_order is not newest, oldest, az or za
        """
        history_filter = HistoryFilter(search_term=search_term, analysis_type=analysis_type)
        return self.engine.history.query(history_filter, SortOrder(sort_order))

    def history_types(self) -> list[str]:
        """Return the analysis type filter options, "All" first."""
        return [ALL_TYPES, *self.engine.history.analysis_types()]

    def get_comparison(self, id_a: str, id_b: str) -> ComparisonResult:
        """Compare two history records.

        Raises:
            NotFoundError: If either id is not in history
            InvalidComparisonSetError: If both ids are the same record
        """
        record_a, record_b = self.engine.history.get_pair(id_a, id_b)
        return self.comparison.compare(record_a, record_b)
