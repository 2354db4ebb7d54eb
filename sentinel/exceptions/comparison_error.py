"""Invalid comparison set exception.

Raised when a comparison is requested on anything other than exactly two
valid, terminal records.
"""

from sentinel.exceptions.base import BaseWorkflowError


class InvalidComparisonSetError(BaseWorkflowError):
    """Raised when a comparison does not receive exactly two terminal records."""

    pass
