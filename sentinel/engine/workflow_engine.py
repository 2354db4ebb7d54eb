"""Workflow engine: owns the run state machine.

The engine creates runs, executes the compiled pipeline graph, publishes
each stage's output as the run's current snapshot, writes all EventLog
entries and usage, and saves terminal states to the HistoryStore.

Example:
    ```python
    engine = WorkflowEngine.from_llm(llm)
    workflow_id = engine.start("Acme Corp", "Market Position")
    final_state = engine.run(workflow_id)
    print(final_state["final_report"])
    ```
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from threading import Lock
from typing import Any, Mapping, Optional

from langchain_core.language_models import BaseChatModel

from sentinel.agents.analyst_agent import AnalystAgent
from sentinel.agents.base_agent import StageExecutor
from sentinel.agents.chat_agent import AnalystChat
from sentinel.agents.context import StageContext
from sentinel.agents.hunter_agent import HunterAgent, SearchTool
from sentinel.agents.reporter_agent import ReporterAgent
from sentinel.agents.router_agent import RouterAgent
from sentinel.agents.scraper_agent import FetchTool, ScraperAgent
from sentinel.agents.social_agent import SocialPostAgent
from sentinel.config import Config, get_config
from sentinel.engine.single_flight import KeyedLock
from sentinel.exceptions.not_found import NotFoundError
from sentinel.exceptions.report_issue import ReportGenerationIssue
from sentinel.exceptions.workflow_error import WorkflowError
from sentinel.graph.state import (
    CANCELLED_ERROR,
    TIMED_OUT_ERROR,
    AgentRole,
    AgentState,
    WorkflowStatus,
    create_initial_state,
    is_terminal,
)
from sentinel.graph.state_utils import snapshot, update_state
from sentinel.graph.workflow import create_pipeline
from sentinel.storage.history_store import HistoryStore
from sentinel.tools.scraper import fetch_page
from sentinel.tools.web_search import search_web
from sentinel.utils.event_log import EventLog, LogEntry
from sentinel.utils.input_validator import sanitize_analysis_type, sanitize_target_company
from sentinel.utils.usage import UsageAccumulator

logger = logging.getLogger(__name__)

SYSTEM_AGENT = "SYSTEM"


@dataclass
class _Run:
    """Mutable bookkeeping for one workflow, guarded by ``lock``."""

    state: AgentState
    lock: Lock = field(default_factory=Lock)
    started_at: Optional[float] = None
    deadline: Optional[float] = None


class WorkflowEngine:
    """Sequences the pipeline stages for each workflow run.

    Stages run sequentially within a run; runs are independent and may run
    concurrently on the engine's thread pool. The engine is the single
    writer of the EventLog, the UsageAccumulator and the HistoryStore.

    Attributes:
        executors: Stage executors by role
        event_log: Activity log shared by all runs
        usage: Usage statistics across finished runs
        history: Store of terminal run states
        config: Engine configuration, also handed to every stage context
    """

    def __init__(
        self,
        executors: Mapping[AgentRole, StageExecutor],
        history: Optional[HistoryStore] = None,
        event_log: Optional[EventLog] = None,
        usage: Optional[UsageAccumulator] = None,
        social_agent: Optional[SocialPostAgent] = None,
        chat_llm: Optional[BaseChatModel] = None,
        config: Optional[Config] = None,
    ) -> None:
        """Initialize the engine with its stage executors and stores.

        Args:
            executors: One executor per AgentRole
            history: History store. In-memory (or history_path) when omitted.
            event_log: Event log. Created with event_log_capacity when omitted.
            usage: Usage accumulator. Created when omitted.
            social_agent: Generator for social posts (optional)
            chat_llm: LLM used by ``open_chat`` (optional)
            config: Configuration. Defaults to get_config().

        Raises:
            ValueError: If an executor is missing
        """
        self.config = config or get_config()
        self.history = history if history is not None else HistoryStore(self.config.history_path)
        self.event_log = event_log if event_log is not None else EventLog(self.config.event_log_capacity)
        self.usage = usage if usage is not None else UsageAccumulator()
        self.executors = dict(executors)
        self.social_agent = social_agent
        self.chat_llm = chat_llm

        self._pipeline = create_pipeline(self.executors, self._stage_context, self._should_stop)
        self._runs: dict[str, _Run] = {}
        self._runs_lock = Lock()
        self._post_locks = KeyedLock()
        self._pool = ThreadPoolExecutor(
            max_workers=self.config.max_concurrent_workflows,
            thread_name_prefix="sentinel-workflow",
        )

    @classmethod
    def from_llm(
        cls,
        llm: BaseChatModel,
        search_tool: Optional[SearchTool] = None,
        fetch_tool: Optional[FetchTool] = None,
        agent_llms: Optional[dict[str, BaseChatModel]] = None,
        **kwargs: Any,
    ) -> "WorkflowEngine":
        """Build an engine with the default executors.

        Args:
            llm: Language model used by every LLM-backed stage
            search_tool: Search callable for the Hunter (Tavily by default)
            fetch_tool: Fetch callable for the Scraper (requests by default)
            agent_llms: Optional per-stage models keyed by "router",
                "analyst", "reporter", "social" and "chat"
            **kwargs: Passed to the constructor (history, event_log, config...)

        Returns:
            Configured WorkflowEngine
        """
        config = kwargs.get("config") or get_config()
        kwargs["config"] = config
        # Default tools take their key and timeout from the engine's config
        if search_tool is None:
            search_tool = partial(search_web, api_key=config.tavily_api_key)
        if fetch_tool is None:
            fetch_tool = partial(fetch_page, timeout=config.scraper_timeout)

        agent_llms = agent_llms or {}
        executors: dict[AgentRole, StageExecutor] = {
            AgentRole.ROUTER: RouterAgent(llm=agent_llms.get("router", llm)),
            AgentRole.HUNTER: HunterAgent(search_tool=search_tool),
            AgentRole.SCRAPER: ScraperAgent(fetch_tool=fetch_tool),
            AgentRole.ANALYST: AnalystAgent(llm=agent_llms.get("analyst", llm)),
            AgentRole.REPORTER: ReporterAgent(llm=agent_llms.get("reporter", llm)),
        }
        kwargs.setdefault("social_agent", SocialPostAgent(agent_llms.get("social", llm)))
        kwargs.setdefault("chat_llm", agent_llms.get("chat", llm))
        return cls(executors, **kwargs)

    # Lifecycle

    def start(self, target_company: Any, analysis_type: Optional[str] = None) -> str:
        """Create a pending run.

        Args:
            target_company: Company to analyze
            analysis_type: Optional category label ("General" when absent)

        Returns:
            The new workflow id

        Raises:
            InvalidInputError: If the company is empty or an input is too long
        """
        company = sanitize_target_company(target_company, self.config)
        label = sanitize_analysis_type(analysis_type, self.config)
        state = create_initial_state(company, label)
        workflow_id = state["workflow_id"]

        with self._runs_lock:
            self._runs[workflow_id] = _Run(state=state)

        self._log(
            SYSTEM_AGENT,
            f"Workflow created for {company} ({state['analysis_type']})",
            workflow_id,
        )
        return workflow_id

    def run(self, workflow_id: str) -> AgentState:
        """Execute a pending run to completion on the calling thread.

        Returns:
            Terminal snapshot of the run

        Raises:
            NotFoundError: If the workflow id is unknown
            WorkflowError: If the run is not pending
        """
        run = self._get_run(workflow_id)
        with run.lock:
            status = run.state.get("status")
            if status != WorkflowStatus.PENDING:
                raise WorkflowError(
                    f"Workflow {workflow_id} cannot be run from status {getattr(status, 'value', status)}",
                    context={"workflow_id": workflow_id},
                )
            run.started_at = time.monotonic()
            if self.config.workflow_timeout_seconds is not None:
                run.deadline = run.started_at + self.config.workflow_timeout_seconds
            run.state = update_state(run.state, status=WorkflowStatus.RUNNING)
            initial = snapshot(run.state)

        self._log(SYSTEM_AGENT, f"Workflow started for {initial['target_company']}", workflow_id)

        try:
            for values in self._pipeline.stream(initial, stream_mode="values"):
                self._publish(run, values)
        except Exception as e:
            # Stage errors are converted by the node wrapper; this is the graph itself
            logger.error(f"Pipeline error in workflow {workflow_id}: {e}", exc_info=True)
            with run.lock:
                if not is_terminal(run.state):
                    run.state = update_state(
                        run.state,
                        status=WorkflowStatus.FAILED,
                        error=f"Workflow error: {e}",
                    )

        return self._finish(run)

    def submit(self, workflow_id: str) -> "Future[AgentState]":
        """Run a pending workflow on the engine's thread pool.

        Raises:
            NotFoundError: If the workflow id is unknown
        """
        self._get_run(workflow_id)
        return self._pool.submit(self.run, workflow_id)

    def analyze(self, target_company: Any, analysis_type: Optional[str] = None) -> AgentState:
        """Start and run a workflow, returning its terminal snapshot."""
        return self.run(self.start(target_company, analysis_type))

    def status(self, workflow_id: str) -> AgentState:
        """Return a snapshot of a run.

        Runs that have not finished are read from the engine; terminal runs
        belong to the HistoryStore and are read from there.

        Raises:
            NotFoundError: If the workflow id is unknown
        """
        with self._runs_lock:
            run = self._runs.get(workflow_id)
        if run is not None:
            with run.lock:
                return snapshot(run.state)
        if workflow_id in self.history:
            return self.history.get(workflow_id)
        raise NotFoundError(
            f"Unknown workflow {workflow_id}",
            context={"workflow_id": workflow_id},
        )

    def cancel(self, workflow_id: str) -> AgentState:
        """Cancel a running workflow.

        The run is marked failed with error "cancelled" immediately. The
        stage in flight finishes but its output is discarded; output of
        earlier stages is kept. Once the report has been published the run
        only has to be settled, so it can no longer be cancelled.

        Returns:
            Snapshot of the cancelled run

        Raises:
            NotFoundError: If the workflow id is unknown
            WorkflowError: If the run is not running or its report is
                already published
        """
        run = self._get_run(workflow_id)
        with run.lock:
            if run.state.get("status") != WorkflowStatus.RUNNING:
                raise WorkflowError(
                    f"Only running workflows can be cancelled (status: {run.state.get('status')})",
                    context={"workflow_id": workflow_id},
                )
            if run.state.get("final_report") is not None:
                raise WorkflowError(
                    f"Workflow {workflow_id} has already produced its report",
                    context={"workflow_id": workflow_id},
                )
            run.state = update_state(
                run.state,
                status=WorkflowStatus.FAILED,
                error=CANCELLED_ERROR,
            )
            cancelled = snapshot(run.state)

        self._log(SYSTEM_AGENT, f"Workflow cancelled during {cancelled['current_agent'].value}", workflow_id)
        self._save_history(cancelled)
        return cancelled

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting background runs and release the thread pool."""
        self._pool.shutdown(wait=wait)

    # Post-run derivations

    def generate_social_post(self, workflow_id: str, regenerate: bool = False) -> str:
        """Return the run's social post, generating it at most once.

        Concurrent callers for the same workflow are serialized, so exactly
        one generation happens and every caller receives its result.

        Args:
            workflow_id: Completed run with a report
            regenerate: Replace an existing post

        Returns:
            Social post text

        Raises:
            NotFoundError: If the workflow id is unknown
            WorkflowError: If the run is not completed, has no report, no
                social agent is configured or generation fails
        """
        if self.social_agent is None:
            raise WorkflowError("Social post generation is not configured")

        with self._post_locks.acquire(workflow_id):
            state = self.status(workflow_id)
            if state.get("status") != WorkflowStatus.COMPLETED or not state.get("final_report"):
                raise WorkflowError(
                    "Social posts can only be generated for completed workflows with a report",
                    context={"workflow_id": workflow_id, "status": str(state.get("status"))},
                )
            existing = state.get("social_post")
            if existing and not regenerate:
                return existing

            context = self._create_context(state, AgentRole.REPORTER)
            post = self.social_agent.generate(state, context)
            self.usage.add_usage(context.cost, context.tokens)
            self._store_social_post(workflow_id, post)
            return post

    def open_chat(self, workflow_id: str) -> AnalystChat:
        """Open a follow-up chat over a completed run.

        Raises:
            NotFoundError: If the workflow id is unknown
            WorkflowError: If no chat model is configured or the run is not
                completed
        """
        if self.chat_llm is None:
            raise WorkflowError("Analyst chat is not configured")
        state = self.status(workflow_id)
        if state.get("status") != WorkflowStatus.COMPLETED:
            raise WorkflowError(
                "Chat is only available for completed workflows",
                context={"workflow_id": workflow_id},
            )
        return AnalystChat(
            self.chat_llm,
            state,
            usage=self.usage,
            cost_per_1k_tokens=self.config.cost_per_1k_tokens,
            settings=self.config,
        )

    # Internals

    def _get_run(self, workflow_id: str) -> _Run:
        """Return the live run.

        Raises:
            WorkflowError: If the run has already finished
            NotFoundError: If the workflow id is unknown
        """
        with self._runs_lock:
            run = self._runs.get(workflow_id)
        if run is None:
            if workflow_id in self.history:
                raise WorkflowError(
                    f"Workflow {workflow_id} has already finished",
                    context={"workflow_id": workflow_id},
                )
            raise NotFoundError(
                f"Unknown workflow {workflow_id}",
                context={"workflow_id": workflow_id},
            )
        return run

    def _stage_context(self, state: AgentState, role: AgentRole) -> StageContext:
        """Context factory for pipeline nodes; publishes the stage being entered."""
        run = self._get_run(state["workflow_id"])
        with run.lock:
            if run.state.get("status") == WorkflowStatus.RUNNING:
                run.state = update_state(run.state, current_agent=role)
        return self._create_context(state, role)

    def _create_context(self, state: AgentState, role: AgentRole) -> StageContext:
        return StageContext(
            state.get("workflow_id"),
            role,
            event_log=self.event_log,
            cost_per_1k_tokens=self.config.cost_per_1k_tokens,
            settings=self.config,
        )

    def _should_stop(self, state: AgentState) -> bool:
        """Stop check evaluated by the graph between stages."""
        run = self._get_run(state["workflow_id"])
        with run.lock:
            if run.state.get("status") == WorkflowStatus.FAILED:
                return True
            if run.deadline is None or time.monotonic() <= run.deadline:
                return False
            # The stage that just finished keeps its output
            run.state = update_state(
                state,
                status=WorkflowStatus.FAILED,
                error=TIMED_OUT_ERROR,
            )

        self._log(SYSTEM_AGENT, "Workflow timed out", state["workflow_id"])
        return True

    def _publish(self, run: _Run, values: AgentState) -> None:
        """Make a graph snapshot the run's current state."""
        with run.lock:
            if is_terminal(run.state):
                # Cancelled or timed out: discard the output, keep the usage
                run.state = update_state(
                    run.state,
                    total_cost=max(run.state.get("total_cost", 0.0), values.get("total_cost", 0.0)),
                    total_tokens=max(run.state.get("total_tokens", 0), values.get("total_tokens", 0)),
                )
                return
            run.state = snapshot(values)

    def _finish(self, run: _Run) -> AgentState:
        """Settle the terminal status, record usage and persist the run."""
        issue: Optional[ReportGenerationIssue] = None
        with run.lock:
            state = run.state
            if state.get("status") == WorkflowStatus.RUNNING:
                if state.get("current_agent") == AgentRole.REPORTER and state.get("final_report") is not None:
                    issue = self._check_report(state)
                    state = update_state(
                        state,
                        status=WorkflowStatus.COMPLETED,
                        report_issue=str(issue) if issue else None,
                    )
                else:
                    state = update_state(
                        state,
                        status=WorkflowStatus.FAILED,
                        error="Workflow ended before the report was written",
                    )
                run.state = state
            final = snapshot(state)
            started_at = run.started_at or time.monotonic()

        workflow_id = final["workflow_id"]
        execution_time_ms = (time.monotonic() - started_at) * 1000

        if issue is not None:
            logger.warning(f"Report generation issue in workflow {workflow_id}: {issue}")
            self._log(AgentRole.REPORTER.value, str(issue), workflow_id)

        if final["status"] == WorkflowStatus.COMPLETED:
            self._log(
                SYSTEM_AGENT,
                f"Workflow completed in {execution_time_ms / 1000:.1f}s",
                workflow_id,
                cost=final.get("total_cost"),
            )
        else:
            self._log(
                SYSTEM_AGENT,
                f"Workflow failed at {final['current_agent'].value}: {final.get('error')}",
                workflow_id,
                cost=final.get("total_cost"),
            )

        self.usage.record(
            float(final.get("total_cost") or 0.0),
            int(final.get("total_tokens") or 0),
            execution_time_ms,
        )
        self._save_history(final)
        with self._runs_lock:
            self._runs.pop(workflow_id, None)
        return final

    def _check_report(self, state: AgentState) -> Optional[ReportGenerationIssue]:
        report = (state.get("final_report") or "").strip()
        if len(report) >= self.config.min_report_length:
            return None
        return ReportGenerationIssue(
            f"Report is too short ({len(report)} characters, minimum {self.config.min_report_length})",
            context={"workflow_id": state.get("workflow_id"), "length": len(report)},
        )

    def _save_history(self, state: AgentState) -> None:
        """Save a terminal state; a failed file write is logged, not raised."""
        try:
            self.history.save(state)
        except OSError as e:
            logger.error(f"Failed to persist history for workflow {state['workflow_id']}: {e}")
            self._log(SYSTEM_AGENT, f"History could not be written: {e}", state["workflow_id"])

    def _store_social_post(self, workflow_id: str, post: str) -> None:
        try:
            self.history.attach_social_post(workflow_id, post)
        except OSError as e:
            logger.error(f"Failed to persist social post for workflow {workflow_id}: {e}")
            self._log(SYSTEM_AGENT, f"History could not be written: {e}", workflow_id)

    def _log(
        self,
        agent: str,
        message: str,
        workflow_id: Optional[str] = None,
        cost: Optional[float] = None,
    ) -> None:
        logger.info(f"[{agent}] {message}")
        self.event_log.append(LogEntry.create(agent, message, cost=cost, workflow_id=workflow_id))
