"""Custom exception classes for the Sentinel workflow engine.

This package contains the exception hierarchy:
- BaseWorkflowError: Base exception for all workflow errors
- WorkflowError: Raised when orchestration fails
- CollectorError: Raised when search or scraping tools fail
- InvalidInputError: Raised when a start request is malformed
- StageFailure: Raised when a pipeline stage fails
- ReportGenerationIssue: Reported when a report is missing or too short
- NotFoundError: Raised for unknown workflow ids
- InvalidComparisonSetError: Raised for invalid comparison requests
"""

from sentinel.exceptions.base import BaseWorkflowError
from sentinel.exceptions.collector_error import CollectorError
from sentinel.exceptions.comparison_error import InvalidComparisonSetError
from sentinel.exceptions.invalid_input import InvalidInputError
from sentinel.exceptions.not_found import NotFoundError
from sentinel.exceptions.report_issue import ReportGenerationIssue
from sentinel.exceptions.stage_failure import StageFailure
from sentinel.exceptions.workflow_error import WorkflowError

__all__ = [
    "BaseWorkflowError",
    "WorkflowError",
    "CollectorError",
    "InvalidInputError",
    "StageFailure",
    "ReportGenerationIssue",
    "NotFoundError",
    "InvalidComparisonSetError",
]
