"""Tests for lead-source/monthly breakdowns and the client-lead soft join."""

from moving_insights.analysis.associations import find_associated_lead
from moving_insights.analysis.breakdowns import monthly_trends, source_performance
from moving_insights.models.records import Client, Lead


def _leads():
    return [
        {"id": "l1", "source": "google", "status": "converted", "created_at": "2024-01-05"},
        {"id": "l2", "source": "google", "status": "lost", "created_at": "2024-01-20"},
        {"id": "l3", "source": "referral", "status": "converted", "created_at": "2024-02-02"},
        {"id": "l4", "source": "yelp", "status": "new", "created_at": "2024-02-10"},
        {"id": "l5", "status": "quoted"},
    ]


def _jobs():
    return [
        {"id": "j1", "lead_id": "l1", "status": "completed", "pricing_model": "flat_rate",
         "total_amount_received": 700, "job_date": "2024-01-15"},
        {"id": "j2", "lead_id": "l3", "status": "completed", "pricing_model": "per_person",
         "actual_total": 450, "job_date": "2024-02-12"},
        {"id": "j3", "status": "scheduled", "estimated_total": 900, "job_date": "2024-02-20"},
    ]


class TestSourcePerformance:
    def test_sorted_by_conversion_rate(self):
        rows = source_performance(_leads(), _jobs())
        assert [r.source for r in rows] == ["referral", "google", "yelp", "other"]

    def test_counts_and_revenue(self):
        rows = {r.source: r for r in source_performance(_leads(), _jobs())}
        assert rows["google"].leads == 2
        assert rows["google"].conversions == 1
        assert rows["google"].conversion_rate == 50
        assert rows["google"].revenue == 700
        assert rows["referral"].revenue == 450
        assert rows["yelp"].revenue == 0

    def test_missing_source_grouped_as_other(self):
        rows = {r.source: r for r in source_performance(_leads(), [])}
        assert rows["other"].leads == 1


class TestMonthlyTrends:
    def test_groups_by_month_oldest_first(self):
        trends = monthly_trends(_jobs(), _leads())
        assert [t.period for t in trends] == ["2024-01", "2024-02"]
        january, february = trends
        assert january.revenue == 700
        assert january.job_count == 1
        assert january.leads == 2
        assert january.conversions == 1
        # Scheduled jobs are not revenue yet
        assert february.job_count == 1
        assert february.revenue == 450
        assert february.leads == 2


class TestFindAssociatedLead:
    def test_matches_on_name_and_phone(self):
        client = Client(name="Ana Diaz", phone="555-0101")
        leads = [
            Lead(id="a", name="Ana Diaz", phone="555-9999"),
            Lead(id="b", name="Ana Diaz", phone="555-0101"),
        ]
        assert find_associated_lead(client, leads).id == "b"

    def test_whitespace_is_ignored(self):
        client = {"name": " Ana Diaz ", "phone": "555-0101"}
        leads = [{"id": "a", "name": "Ana Diaz", "phone": " 555-0101"}]
        assert find_associated_lead(client, leads).id == "a"

    def test_most_recent_lead_wins(self):
        client = Client(name="Ana Diaz", phone="555-0101")
        leads = [
            Lead(id="old", name="Ana Diaz", phone="555-0101", created_at="2023-01-01T00:00:00"),
            Lead(id="undated", name="Ana Diaz", phone="555-0101"),
            Lead(id="new", name="Ana Diaz", phone="555-0101", created_at="2024-06-01T00:00:00"),
        ]
        assert find_associated_lead(client, leads).id == "new"

    def test_equal_timestamps_keep_first(self):
        client = Client(name="Ana Diaz", phone="555-0101")
        leads = [
            Lead(id="first", name="Ana Diaz", phone="555-0101", created_at="2024-01-01"),
            Lead(id="second", name="Ana Diaz", phone="555-0101", created_at="2024-01-01"),
        ]
        assert find_associated_lead(client, leads).id == "first"

    def test_no_match(self):
        client = Client(name="Ana Diaz", phone="555-0101")
        assert find_associated_lead(client, [Lead(name="Bo Lin", phone="555-0101")]) is None

    def test_client_without_phone_never_matches(self):
        client = Client(name="Ana Diaz")
        assert find_associated_lead(client, [Lead(name="Ana Diaz")]) is None
