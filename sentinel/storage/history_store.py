"""History store for terminal workflow records.

The store keeps every completed or failed AgentState keyed by workflow id
and answers filtered, sorted queries over them. When a path is configured
the records are persisted to a JSON file, rewritten atomically on every
change.

Example:
    ```python
    store = HistoryStore(path=Path("./data/history.json"))
    store.save(final_state)
    store.query(HistoryFilter(search_term="acme"), SortOrder.AZ)
    ```
"""

import copy
import json
import locale
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Iterable, Optional

from sentinel.exceptions.not_found import NotFoundError
from sentinel.exceptions.workflow_error import WorkflowError
from sentinel.graph.state import (
    DEFAULT_ANALYSIS_TYPE,
    AgentRole,
    AgentState,
    WorkflowStatus,
    is_terminal,
)
from sentinel.models.history_query import ALL_TYPES, HistoryFilter, SortOrder

logger = logging.getLogger(__name__)

FILE_FORMAT_VERSION = 1


def timestamp_sort_key(state: AgentState) -> float:
    """Return the record's creation time in epoch seconds.

    Missing or unparsable timestamps sort as the epoch (0).
    """
    raw = state.get("timestamp")
    if not raw:
        return 0.0
    try:
        parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def name_sort_key(state: AgentState) -> tuple[str, str]:
    """Locale-aware sort key on the target company."""
    name = state.get("target_company") or ""
    return locale.strxfrm(name.casefold()), name


def record_analysis_type(state: AgentState) -> str:
    """Return the record's analysis type, defaulting to "General"."""
    return state.get("analysis_type") or DEFAULT_ANALYSIS_TYPE


def matches(state: AgentState, history_filter: HistoryFilter) -> bool:
    """Return True when a record passes the filter."""
    search_term = (history_filter.search_term or "").strip()
    if search_term:
        company = state.get("target_company") or ""
        if search_term.casefold() not in company.casefold():
            return False

    analysis_type = history_filter.analysis_type
    if analysis_type and analysis_type != ALL_TYPES:
        if record_analysis_type(state) != analysis_type:
            return False
    return True


def sort_records(records: Iterable[AgentState], sort_order: SortOrder) -> list[AgentState]:
    """Sort records; ties keep their insertion order."""
    sort_order = SortOrder(sort_order)
    if sort_order == SortOrder.NEWEST:
        return sorted(records, key=timestamp_sort_key, reverse=True)
    if sort_order == SortOrder.OLDEST:
        return sorted(records, key=timestamp_sort_key)
    if sort_order == SortOrder.AZ:
        return sorted(records, key=name_sort_key)
    return sorted(records, key=name_sort_key, reverse=True)


class HistoryStore:
    """Thread-safe collection of terminal AgentState records.

    Attributes:
        path: Optional JSON file the records are persisted to
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else None
        self._records: dict[str, AgentState] = {}
        self._lock = Lock()
        if self.path is not None and self.path.exists():
            self._records = self._load(self.path)
            logger.info(f"Loaded {len(self._records)} history records from {self.path}")

    def save(self, state: AgentState) -> None:
        """Insert or overwrite a record by workflow id.

        Raises:
            WorkflowError: If the state is not terminal or has no id
        """
        workflow_id = state.get("workflow_id")
        if not workflow_id:
            raise WorkflowError("Cannot save a record without a workflow id")
        if not is_terminal(state):
            raise WorkflowError(
                f"Only completed or failed workflows can be saved (status: {state.get('status')})",
                context={"workflow_id": workflow_id},
            )

        with self._lock:
            self._records[workflow_id] = copy.deepcopy(state)
            self._persist()
        logger.debug(f"History record saved: {workflow_id}")

    def get(self, workflow_id: str) -> AgentState:
        """Return a copy of a record.

        Raises:
            NotFoundError: If no record has this id
        """
        with self._lock:
            state = self._records.get(workflow_id)
            if state is None:
                raise NotFoundError(
                    f"No history record for workflow {workflow_id}",
                    context={"workflow_id": workflow_id},
                )
            return copy.deepcopy(state)

    def get_pair(self, id_a: str, id_b: str) -> tuple[AgentState, AgentState]:
        """Return copies of two records, in argument order."""
        return self.get(id_a), self.get(id_b)

    def query(
        self,
        history_filter: Optional[HistoryFilter] = None,
        sort_order: SortOrder = SortOrder.NEWEST,
    ) -> list[AgentState]:
        """Return records matching a filter in the requested order.

        Args:
            history_filter: Company substring and analysis type filter
            sort_order: newest, oldest, az or za

        Returns:
            List of record copies
        """
        history_filter = history_filter or HistoryFilter()
        with self._lock:
            records = [
                copy.deepcopy(state)
                for state in self._records.values()
                if matches(state, history_filter)
            ]
        return sort_records(records, sort_order)

    def analysis_types(self) -> list[str]:
        """Return distinct analysis types in first-seen order."""
        with self._lock:
            seen: dict[str, None] = {}
            for state in self._records.values():
                seen.setdefault(record_analysis_type(state), None)
            return list(seen)

    def attach_social_post(self, workflow_id: str, social_post: str) -> AgentState:
        """Set the social post of a stored record.

        Returns:
            Copy of the updated record

        Raises:
            NotFoundError: If no record has this id
        """
        with self._lock:
            state = self._records.get(workflow_id)
            if state is None:
                raise NotFoundError(
                    f"No history record for workflow {workflow_id}",
                    context={"workflow_id": workflow_id},
                )
            state["social_post"] = social_post
            self._persist()
            return copy.deepcopy(state)

    def __contains__(self, workflow_id: object) -> bool:
        with self._lock:
            return workflow_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _persist(self) -> None:
        """Write all records to the JSON file. Caller holds the lock."""
        if self.path is None:
            return

        payload = {
            "version": FILE_FORMAT_VERSION,
            "records": list(self._records.values()),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, default=_json_default)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    @staticmethod
    def _load(path: Path) -> dict[str, AgentState]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise WorkflowError(
                f"Failed to load history from {path}",
                context={"path": str(path), "error": str(e)},
            ) from e

        records: dict[str, AgentState] = {}
        for raw in payload.get("records", []):
            state = _decode_record(raw)
            records[state["workflow_id"]] = state
        return records


def _json_default(value: Any) -> Any:
    if hasattr(value, "value"):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode_record(raw: dict[str, Any]) -> AgentState:
    state: AgentState = AgentState(**raw)  # type: ignore[typeddict-item]
    if "status" in state:
        state["status"] = WorkflowStatus(state["status"])
    if "current_agent" in state:
        state["current_agent"] = AgentRole(state["current_agent"])
    return state
