"""Report generation issue.

Raised (and reported, not propagated) when the Reporter stage produced an
empty or too-short report. The workflow still completes; the issue only
downgrades report quality.
"""

from sentinel.exceptions.base import BaseWorkflowError


class ReportGenerationIssue(BaseWorkflowError):
    """Non-fatal issue: the final report is missing or shorter than required."""

    pass
