"""Analysis Report — everything the UI renders for one reporting period."""

from datetime import datetime
from typing import List

from pydantic import BaseModel

from moving_insights.models.insight import BusinessInsight
from moving_insights.models.metrics import BusinessMetrics
from moving_insights.models.period import ResolvedRange


class SourcePerformance(BaseModel):
    """Lead funnel results for one lead source."""

    source: str
    leads: int = 0
    conversions: int = 0
    conversion_rate: float = 0              # Percent
    revenue: float = 0                      # Completed jobs linked by lead_id


class PeriodTrend(BaseModel):
    """Activity for one calendar month (YYYY-MM)."""

    period: str
    revenue: float = 0
    job_count: int = 0
    leads: int = 0
    conversions: int = 0


class AnalysisReport(BaseModel):
    date_range: str
    period_label: str
    bounds: ResolvedRange
    metrics: BusinessMetrics
    insights: List[BusinessInsight] = []
    source_performance: List[SourcePerformance] = []
    monthly_trends: List[PeriodTrend] = []
    generated_at: datetime
