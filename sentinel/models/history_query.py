"""History query models: filter and sort order."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

ALL_TYPES = "All"


class SortOrder(str, Enum):
    """Ordering of history query results."""

    NEWEST = "newest"
    OLDEST = "oldest"
    AZ = "az"
    ZA = "za"


class HistoryFilter(BaseModel):
    """Filter applied to history queries.

    Attributes:
        search_term: Case-insensitive substring matched against the company
        analysis_type: Exact analysis type label; None or "All" disables it
    """

    model_config = {"frozen": True}

    search_term: Optional[str] = Field(default=None)
    analysis_type: Optional[str] = Field(default=None)
