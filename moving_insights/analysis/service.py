"""
Business Analysis Service — one reporting request end to end.

Flow: resolve the period once → filter each collection on its own date
column → aggregate metrics → generate insights → attach breakdowns.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Union

from moving_insights.analysis.aggregator import MetricsAggregator
from moving_insights.analysis.breakdowns import monthly_trends, source_performance
from moving_insights.analysis.insights import InsightGenerator
from moving_insights.models.period import DateRange
from moving_insights.models.records import Client, Employee, Job, Lead, TimeEntry, parse_records
from moving_insights.models.report import AnalysisReport
from moving_insights.periods.filter import filter_records
from moving_insights.periods.resolver import period_label, resolve_date_range

logger = logging.getLogger(__name__)


class BusinessAnalysisService:
    """Produces an AnalysisReport for a period from raw collections."""

    def __init__(
        self,
        aggregator: Optional[MetricsAggregator] = None,
        insight_generator: Optional[InsightGenerator] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.aggregator = aggregator or MetricsAggregator()
        self.insight_generator = insight_generator or InsightGenerator()
        self.clock = clock

    def analyze(
        self,
        jobs: Iterable[Any],
        leads: Iterable[Any],
        clients: Iterable[Any],
        time_entries: Iterable[Any],
        employees: Iterable[Any],
        date_range: Union[DateRange, str] = DateRange.SINCE_INCEPTION,
    ) -> AnalysisReport:
        now = self.clock()
        bounds = resolve_date_range(date_range, now)
        label = period_label(date_range)

        jobs = filter_records(parse_records(Job, jobs), bounds, "job_date")
        leads = filter_records(parse_records(Lead, leads), bounds, "created_at")
        clients = filter_records(parse_records(Client, clients), bounds, "created_at")
        time_entries = filter_records(parse_records(TimeEntry, time_entries), bounds, "entry_date")
        employees = parse_records(Employee, employees)

        metrics = self.aggregator.aggregate(jobs, leads, clients, time_entries, employees)
        insights = self.insight_generator.generate(metrics, label)

        logger.info(
            "Analyzed %s: %d jobs, %d leads, revenue=%s, %d insights",
            label, len(jobs), len(leads), metrics.total_revenue, len(insights),
        )

        tag = date_range.value if isinstance(date_range, DateRange) else str(date_range)
        return AnalysisReport(
            date_range=tag,
            period_label=label,
            bounds=bounds,
            metrics=metrics,
            insights=insights,
            source_performance=source_performance(leads, jobs),
            monthly_trends=monthly_trends(jobs, leads),
            generated_at=now,
        )
