"""Per-stage handle for log and usage reporting.

A StageContext is created by the engine for each stage invocation. Stages
report activity and token usage through it; the engine owns the EventLog
and folds the context's totals into the run state afterwards.
"""

import logging
from typing import Any, Optional

from sentinel.config import Config, get_config
from sentinel.utils.event_log import EventLog, LogEntry
from sentinel.utils.usage import estimate_cost, extract_token_usage

logger = logging.getLogger(__name__)


class StageContext:
    """Engine-owned reporting handle passed to ``StageExecutor.execute``.

    Attributes:
        workflow_id: Run the stage belongs to
        agent: Role name used as the log entry agent
        settings: Configuration of the engine running the stage
        cost: USD cost reported so far
        tokens: Tokens reported so far
    """

    def __init__(
        self,
        workflow_id: Optional[str],
        agent: str,
        event_log: Optional[EventLog] = None,
        cost_per_1k_tokens: float = 0.0,
        settings: Optional[Config] = None,
    ) -> None:
        self.workflow_id = workflow_id
        self.settings = settings or get_config()
        self.agent = str(getattr(agent, "value", agent))
        self.cost = 0.0
        self.tokens = 0
        self._event_log = event_log
        self._cost_per_1k_tokens = cost_per_1k_tokens

    def log(self, message: str, cost: Optional[float] = None) -> None:
        """Emit a log entry attributed to this stage."""
        logger.info(f"[{self.agent}] {message}")
        if self._event_log is not None:
            self._event_log.append(
                LogEntry.create(self.agent, message, cost=cost, workflow_id=self.workflow_id)
            )

    def add_usage(self, tokens: int, cost: Optional[float] = None) -> float:
        """Account for tokens spent by the stage.

        Args:
            tokens: Tokens consumed
            cost: Explicit USD cost; estimated from tokens when omitted

        Returns:
            Cost attributed to the usage
        """
        if tokens < 0:
            raise ValueError(f"tokens must be non-negative, got {tokens}")
        if cost is None:
            cost = estimate_cost(tokens, self._cost_per_1k_tokens)
        self.tokens += tokens
        self.cost += cost
        return cost

    def record_usage(self, response: Any) -> float:
        """Account for the token usage reported on an LLM response.

        Returns:
            Cost attributed to the response (0.0 when no usage is reported)
        """
        usage = extract_token_usage(response)
        if not usage:
            return 0.0
        return self.add_usage(usage["total_tokens"])
