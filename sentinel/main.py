"""Main entry point for the Sentinel competitive intelligence engine.

This module handles configuration loading, LLM initialization, engine
creation and execution of a single analysis from the command line.

Example:
    ```python
    from sentinel.main import run_analysis

    result = run_analysis("Acme Corp", "Market Position")
    print(result["final_report"])
    ```

    Or as a command-line tool:
    ```bash
    sentinel "Acme Corp" --type "Market Position"
    ```
"""

import argparse
import logging
import sys
from typing import Any, Optional

from langchain_groq import ChatGroq

from sentinel.config import Config, get_config
from sentinel.engine.workflow_engine import WorkflowEngine
from sentinel.exceptions.base import BaseWorkflowError
from sentinel.exceptions.invalid_input import InvalidInputError
from sentinel.graph.state import AgentState, WorkflowStatus

logger = logging.getLogger(__name__)

LLM_STAGES = ["router", "analyst", "reporter", "social", "chat"]


def initialize_llms(config: Config) -> dict[str, ChatGroq]:
    """Create one ChatGroq client per LLM-backed stage.

    Stages configured with the same model share a client.

    Args:
        config: Config instance from get_config()

    Returns:
        Dictionary mapping stage names to ChatGroq instances

    Raises:
        RuntimeError: If GROQ_API_KEY is not configured
    """
    if not config.groq_api_key:
        raise RuntimeError(
            "GROQ_API_KEY not configured. Set it in your .env file or environment variables."
        )

    model_to_llm: dict[str, ChatGroq] = {}
    stage_llms: dict[str, ChatGroq] = {}
    for stage in LLM_STAGES:
        model_name = config.get_model_for_stage(stage)
        if model_name not in model_to_llm:
            logger.info(f"Creating LLM instance for model: {model_name}")
            model_to_llm[model_name] = ChatGroq(
                api_key=config.groq_api_key,
                model=model_name,
                temperature=0,
            )
        stage_llms[stage] = model_to_llm[model_name]
        logger.debug(f"Stage '{stage}' assigned model: {model_name}")
    return stage_llms


def create_engine(config: Optional[Config] = None, **kwargs: Any) -> WorkflowEngine:
    """Create a WorkflowEngine backed by Groq, Tavily and requests.

    Raises:
        RuntimeError: If a required API key is missing
    """
    config = config or get_config()
    if not config.tavily_api_key:
        raise RuntimeError(
            "TAVILY_API_KEY not configured. Set it in your .env file or environment variables."
        )
    stage_llms = initialize_llms(config)
    return WorkflowEngine.from_llm(
        stage_llms["router"],
        agent_llms=stage_llms,
        config=config,
        **kwargs,
    )


def run_analysis(
    target_company: str,
    analysis_type: Optional[str] = None,
    engine: Optional[WorkflowEngine] = None,
) -> AgentState:
    """Run one analysis and return its terminal state.

    Args:
        target_company: Company to analyze
        analysis_type: Optional category label
        engine: Engine to use. Created from configuration when omitted.

    Returns:
        Terminal AgentState

    Raises:
        InvalidInputError: If the inputs are invalid
        RuntimeError: If the engine cannot be created
    """
    owns_engine = engine is None
    if engine is None:
        engine = create_engine()
    try:
        logger.info(f"Starting analysis for {target_company}")
        return engine.analyze(target_company, analysis_type)
    finally:
        if owns_engine:
            engine.shutdown()


def format_stats(engine: WorkflowEngine) -> str:
    stats = engine.usage.stats()
    return (
        f"Workflows: {stats.total_workflows} | "
        f"Tokens: {stats.total_tokens} | "
        f"Cost: ${stats.total_cost:.4f} | "
        f"Avg time: {stats.avg_execution_time_ms / 1000:.1f}s"
    )


def main() -> int:
    """Main entry point for command-line usage.

    Returns:
        Exit code (0 for success, 1 for failure, 130 when interrupted)
    """
    parser = argparse.ArgumentParser(
        description="Sentinel competitive intelligence engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sentinel "Acme Corp"
  sentinel "Acme Corp" --type "Pricing Strategy" --social
        """,
    )
    parser.add_argument("company", type=str, help="Company to analyze")
    parser.add_argument(
        "--type",
        "-t",
        dest="analysis_type",
        default=None,
        help='Analysis type label (default: "General")',
    )
    parser.add_argument(
        "--social",
        action="store_true",
        help="Also generate a social post from the report",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )
    args = parser.parse_args()

    config = get_config()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    engine: Optional[WorkflowEngine] = None
    try:
        engine = create_engine(config)
        result = run_analysis(args.company, args.analysis_type, engine=engine)

        if result["status"] != WorkflowStatus.COMPLETED:
            print(
                f"\nAnalysis failed at {result['current_agent'].value}: {result.get('error')}",
                file=sys.stderr,
            )
            print(format_stats(engine))
            return 1

        print("\n" + "=" * 80)
        print(f"{result['target_company'].upper()} - {result['analysis_type'].upper()}")
        print("=" * 80 + "\n")
        print(result.get("final_report") or "")
        print("\n" + "=" * 80)
        if result.get("report_issue"):
            print(f"Warning: {result['report_issue']}")

        if args.social:
            post = engine.generate_social_post(result["workflow_id"])
            print("\nSocial post:\n")
            print(post)

        print(format_stats(engine))
        return 0

    except InvalidInputError as e:
        logger.error(f"Invalid input: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (BaseWorkflowError, RuntimeError) as e:
        logger.error(f"Runtime error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        print("\nAnalysis interrupted by user.", file=sys.stderr)
        return 130
    finally:
        if engine is not None:
            engine.shutdown(wait=False)


if __name__ == "__main__":
    sys.exit(main())
