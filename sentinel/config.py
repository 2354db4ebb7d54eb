"""Configuration management for the Sentinel workflow engine.

This module handles environment variable loading and provides type-safe
configuration access using Pydantic models.
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Config(BaseSettings):
    """Application configuration loaded from environment variables and .env file.

    All configuration values are automatically loaded from:
    1. `.env` file in the project root (if present)
    2. Environment variables (as fallback)

    API keys are optional at load time so that the engine can be built with
    injected capabilities (tests, alternative backends). The CLI checks that
    the keys it needs are present before creating its clients.

    Attributes:
        groq_api_key: API key for the Groq LLM service
        tavily_api_key: API key for the Tavily search service
        llm_model: Default LLM model name for all stages (fallback)
        llm_model_router: Model for the Router stage (optional)
        llm_model_analyst: Model for the Analyst stage (optional)
        llm_model_reporter: Model for the Reporter stage (optional)
        llm_model_social: Model for social post generation (optional)
        llm_model_chat: Model for the follow-up analyst chat (optional)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        event_log_capacity: Maximum number of retained log entries
        max_concurrent_workflows: Worker threads for background runs
        workflow_timeout_seconds: Optional wall-clock limit per run
        min_report_length: Minimum report length before a report issue is raised
        hunter_max_urls: Maximum number of sources kept by the Hunter stage
        hunter_results_per_query: Search results requested per query
        scraper_max_chars: Maximum characters kept per scraped page
        scraper_timeout: HTTP timeout for page fetches in seconds
        cost_per_1k_tokens: Blended USD price per 1000 tokens
        llm_retry_attempts: Maximum retry attempts for LLM API calls
        llm_retry_backoff_min: Minimum backoff time in seconds
        llm_retry_backoff_max: Maximum backoff time in seconds
        max_company_length: Maximum character length of a target company
        max_analysis_type_length: Maximum character length of an analysis type
        history_path: Optional JSON file used to persist run history
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    groq_api_key: Optional[str] = Field(
        default=None,
        description="Groq API key for LLM service",
    )

    tavily_api_key: Optional[str] = Field(
        default=None,
        description="Tavily API key for source discovery",
    )

    llm_model: str = Field(
        default="llama-3.1-8b-instant",
        description="Default LLM model name for all stages (fallback)",
    )

    llm_model_router: Optional[str] = Field(
        default=None,
        description="Model for the Router stage",
    )

    llm_model_analyst: Optional[str] = Field(
        default=None,
        description="Model for the Analyst stage",
    )

    llm_model_reporter: Optional[str] = Field(
        default=None,
        description="Model for the Reporter stage",
    )

    llm_model_social: Optional[str] = Field(
        default=None,
        description="Model for social post generation",
    )

    llm_model_chat: Optional[str] = Field(
        default=None,
        description="Model for the follow-up analyst chat",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    # Engine configuration
    event_log_capacity: int = Field(
        default=200,
        description="Maximum number of log entries retained before the oldest are evicted",
        ge=1,
        le=100000,
    )

    max_concurrent_workflows: int = Field(
        default=4,
        description="Number of worker threads used for background workflow runs",
        ge=1,
        le=64,
    )

    workflow_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Optional wall-clock limit for a single run, checked between stages",
        gt=0,
    )

    min_report_length: int = Field(
        default=10,
        description="Reports shorter than this raise a non-fatal report generation issue",
        ge=1,
        le=100000,
    )

    # Stage configuration
    hunter_max_urls: int = Field(
        default=8,
        description="Maximum number of source URLs kept by the Hunter stage",
        ge=1,
        le=100,
    )

    hunter_results_per_query: int = Field(
        default=5,
        description="Search results requested for each Hunter query",
        ge=1,
        le=20,
    )

    scraper_max_chars: int = Field(
        default=4000,
        description="Maximum characters kept from each scraped page",
        ge=100,
        le=200000,
    )

    scraper_timeout: int = Field(
        default=10,
        description="HTTP timeout for page fetches in seconds",
        ge=1,
        le=120,
    )

    cost_per_1k_tokens: float = Field(
        default=0.0006,
        description="Blended USD price per 1000 tokens used to estimate run cost",
        ge=0.0,
    )

    # Rate limiting and retry configuration
    llm_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for LLM API calls",
        ge=1,
        le=10,
    )

    llm_retry_backoff_min: float = Field(
        default=1.0,
        description="Minimum backoff time in seconds for exponential backoff",
        ge=0.01,
        le=60.0,
    )

    llm_retry_backoff_max: float = Field(
        default=30.0,
        description="Maximum backoff time in seconds for exponential backoff",
        ge=0.01,
        le=300.0,
    )

    # Input validation configuration
    max_company_length: int = Field(
        default=200,
        description="Maximum character length for a target company",
        ge=10,
        le=5000,
    )

    max_analysis_type_length: int = Field(
        default=100,
        description="Maximum character length for an analysis type label",
        ge=5,
        le=1000,
    )

    # History persistence
    history_path: Optional[Path] = Field(
        default=None,
        description="JSON file used to persist run history. In-memory only when unset.",
    )

    def get_model_for_stage(self, stage_name: str) -> str:
        """Get the model name for a specific LLM-backed stage.

        Falls back to llm_model when no stage-specific model is set.

        Args:
            stage_name: Name of the stage (e.g., "router", "analyst", "chat")

        Returns:
            Model name string for the stage
        """
        stage_model_map = {
            "router": self.llm_model_router,
            "analyst": self.llm_model_analyst,
            "reporter": self.llm_model_reporter,
            "social": self.llm_model_social,
            "chat": self.llm_model_chat,
        }

        stage_model = stage_model_map.get(stage_name.lower())
        return stage_model or self.llm_model

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level is one of the allowed values.

        Args:
            value: Log level string to validate

        Returns:
            Uppercase log level string

        Raises:
            ValueError: If log level is not one of the allowed values
        """
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in allowed_levels:
            raise ValueError(
                f"log_level must be one of {allowed_levels}, got {value}"
            )
        return upper_value

    @field_validator("llm_retry_backoff_max")
    @classmethod
    def validate_backoff_max(cls, value: float, info: ValidationInfo) -> float:
        """Ensure the maximum backoff is not below the minimum backoff."""
        backoff_min = info.data.get("llm_retry_backoff_min")
        if backoff_min is not None and value < backoff_min:
            raise ValueError(
                f"llm_retry_backoff_max ({value}) must be >= llm_retry_backoff_min ({backoff_min})"
            )
        return value


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    Loads configuration from `.env` file (if present) and environment variables
    on first call and returns the same instance on subsequent calls.

    Returns:
        Config instance with loaded configuration values

    Raises:
        ValueError: If configuration values are invalid
    """
    global _config
    if _config is None:
        _config = Config()
        logger.debug(
            f"Configuration loaded: "
            f"GROQ_API_KEY={'set' if _config.groq_api_key else 'missing'}, "
            f"TAVILY_API_KEY={'set' if _config.tavily_api_key else 'missing'}, "
            f"LLM_MODEL={_config.llm_model}, "
            f"EVENT_LOG_CAPACITY={_config.event_log_capacity}"
        )
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables.

    Useful for testing or when configuration changes at runtime.

    Returns:
        New Config instance with reloaded configuration values
    """
    global _config
    _config = Config()
    return _config
