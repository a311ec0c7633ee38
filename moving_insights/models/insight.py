"""Business Insight — advisory text derived from metrics against industry benchmarks."""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel


class InsightCategory(str, Enum):
    REVENUE = "revenue"
    PROFITABILITY = "profitability"
    OPERATIONS = "operations"
    MARKETING = "marketing"
    WORKFORCE = "workforce"
    COMPETITIVE = "competitive"


class InsightPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class InsightMetric(BaseModel):
    label: str
    value: Union[str, float]


class BusinessInsight(BaseModel):
    """One fired benchmark rule, rendered for the owner."""

    category: InsightCategory
    priority: InsightPriority
    title: str
    description: str
    impact: str
    recommendation: str
    expected_outcome: str
    timeframe: str
    metrics: Optional[List[InsightMetric]] = None
