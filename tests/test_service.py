"""Tests for the Business Analysis Service (filter → aggregate → insights)."""

from datetime import datetime

from moving_insights.analysis.service import BusinessAnalysisService
from moving_insights.models.insight import InsightPriority

NOW = datetime(2024, 3, 20, 10, 0)


def _collections():
    return dict(
        jobs=[
            {"id": "j1", "status": "completed", "pricing_model": "flat_rate",
             "total_amount_received": 350, "job_date": "2024-03-05"},
            {"id": "j2", "status": "completed", "pricing_model": "flat_rate",
             "total_amount_received": 900, "job_date": "2024-01-15"},
        ],
        leads=[
            {"id": "l1", "status": "converted", "source": "google", "created_at": "2024-03-01T09:00:00"},
            {"id": "l2", "status": "lost", "source": "yelp", "created_at": "2023-12-01T09:00:00"},
        ],
        clients=[
            {"id": "c1", "total_jobs_completed": 3, "created_at": "2024-03-02T12:00:00"},
        ],
        time_entries=[],
        employees=[{"id": "e1", "status": "active"}],
    )


class TestBusinessAnalysisService:
    def setup_method(self):
        self.service = BusinessAnalysisService(clock=lambda: NOW)

    def test_month_filters_each_collection_on_its_date(self):
        report = self.service.analyze(**_collections(), date_range="this_month")
        assert report.date_range == "this_month"
        assert report.period_label == "this month"
        assert report.bounds.start == datetime(2024, 3, 1)
        assert report.metrics.completed_jobs == 1
        assert report.metrics.total_revenue == 350
        assert report.metrics.total_leads == 1
        assert report.metrics.conversion_rate == 100
        assert report.metrics.repeat_customer_rate == 100
        assert report.generated_at == NOW

    def test_month_insights(self):
        report = self.service.analyze(**_collections(), date_range="this_month")
        # Job value ($350) is the only weak spot this month.
        assert len(report.insights) == 1
        assert report.insights[0].priority == InsightPriority.HIGH
        assert "this month" in report.insights[0].description

    def test_since_inception_uses_everything(self):
        report = self.service.analyze(**_collections())
        assert report.bounds.is_unbounded
        assert report.metrics.completed_jobs == 2
        assert report.metrics.total_revenue == 1250
        assert report.metrics.total_leads == 2

    def test_breakdowns_are_attached(self):
        report = self.service.analyze(**_collections())
        assert {row.source for row in report.source_performance} == {"google", "yelp"}
        assert [t.period for t in report.monthly_trends] == ["2023-12", "2024-01", "2024-03"]

    def test_unknown_range_reports_everything(self):
        report = self.service.analyze(**_collections(), date_range="fiscal_year")
        assert report.bounds.is_unbounded
        assert report.period_label == "all time"
        assert report.metrics.completed_jobs == 2
