"""Moving Insights data models."""

from moving_insights.models.insight import (
    BusinessInsight,
    InsightCategory,
    InsightMetric,
    InsightPriority,
)
from moving_insights.models.metrics import BusinessMetrics
from moving_insights.models.period import DateRange, ResolvedRange
from moving_insights.models.records import (
    Client,
    Employee,
    EmployeeStatus,
    Job,
    JobStatus,
    Lead,
    LeadSource,
    LeadStatus,
    PricingModel,
    TimeEntry,
    parse_records,
)
from moving_insights.models.report import AnalysisReport, PeriodTrend, SourcePerformance
from moving_insights.models.snapshot import OfflineSnapshot, SnapshotSizeInfo

__all__ = [
    "AnalysisReport",
    "BusinessInsight",
    "BusinessMetrics",
    "Client",
    "DateRange",
    "Employee",
    "EmployeeStatus",
    "InsightCategory",
    "InsightMetric",
    "InsightPriority",
    "Job",
    "JobStatus",
    "Lead",
    "LeadSource",
    "LeadStatus",
    "OfflineSnapshot",
    "PeriodTrend",
    "PricingModel",
    "ResolvedRange",
    "SnapshotSizeInfo",
    "SourcePerformance",
    "TimeEntry",
    "parse_records",
]
