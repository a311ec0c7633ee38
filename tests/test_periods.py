"""Tests for the date range resolver and record filter."""

from datetime import datetime

import pytest

from moving_insights.models.period import DateRange, ResolvedRange
from moving_insights.models.records import Job
from moving_insights.periods.filter import filter_by_date_range, filter_records
from moving_insights.periods.resolver import period_label, resolve_date_range

END_MS = 999000


class TestResolveDateRange:
    def test_today(self):
        now = datetime(2024, 3, 13, 15, 42, 7)
        bounds = resolve_date_range("today", now)
        assert bounds.start == datetime(2024, 3, 13)
        assert bounds.end == datetime(2024, 3, 13, 23, 59, 59, END_MS)

    def test_week_starts_on_sunday(self):
        # Wednesday 13 March 2024 -> Sunday 10 March .. Saturday 16 March
        bounds = resolve_date_range(DateRange.THIS_WEEK, datetime(2024, 3, 13, 9, 0))
        assert bounds.start == datetime(2024, 3, 10)
        assert bounds.end == datetime(2024, 3, 16, 23, 59, 59, END_MS)

    def test_week_on_a_sunday_starts_that_day(self):
        bounds = resolve_date_range("this_week", datetime(2024, 3, 10, 8, 0))
        assert bounds.start == datetime(2024, 3, 10)
        assert bounds.end == datetime(2024, 3, 16, 23, 59, 59, END_MS)

    def test_week_spanning_year_boundary(self):
        # Tuesday 31 Dec 2024 -> Sunday 29 Dec .. Saturday 4 Jan 2025
        bounds = resolve_date_range("this_week", datetime(2024, 12, 31, 12, 0))
        assert bounds.start == datetime(2024, 12, 29)
        assert bounds.end == datetime(2025, 1, 4, 23, 59, 59, END_MS)

    def test_month_leap_february(self):
        bounds = resolve_date_range("this_month", datetime(2024, 2, 10))
        assert bounds.start == datetime(2024, 2, 1)
        assert bounds.end == datetime(2024, 2, 29, 23, 59, 59, END_MS)

    def test_month_non_leap_february(self):
        bounds = resolve_date_range("this_month", datetime(2023, 2, 10))
        assert bounds.end == datetime(2023, 2, 28, 23, 59, 59, END_MS)

    def test_month_december(self):
        bounds = resolve_date_range("this_month", datetime(2024, 12, 5))
        assert bounds.start == datetime(2024, 12, 1)
        assert bounds.end == datetime(2024, 12, 31, 23, 59, 59, END_MS)

    def test_quarter_first_quarter_of_leap_year(self):
        bounds = resolve_date_range("this_quarter", datetime(2024, 2, 29, 18, 0))
        assert bounds.start == datetime(2024, 1, 1)
        assert bounds.end == datetime(2024, 3, 31, 23, 59, 59, END_MS)

    def test_quarter_on_quarter_boundary(self):
        # 1 October is the first day of Q4
        bounds = resolve_date_range("this_quarter", datetime(2024, 10, 1, 0, 0))
        assert bounds.start == datetime(2024, 10, 1)
        assert bounds.end == datetime(2024, 12, 31, 23, 59, 59, END_MS)

    def test_quarter_last_day_of_q3(self):
        bounds = resolve_date_range("this_quarter", datetime(2024, 9, 30, 23, 0))
        assert bounds.start == datetime(2024, 7, 1)
        assert bounds.end == datetime(2024, 9, 30, 23, 59, 59, END_MS)

    def test_year(self):
        bounds = resolve_date_range("this_year", datetime(2024, 6, 15))
        assert bounds.start == datetime(2024, 1, 1)
        assert bounds.end == datetime(2024, 12, 31, 23, 59, 59, END_MS)

    def test_since_inception_is_unbounded(self):
        bounds = resolve_date_range("since_inception", datetime(2024, 6, 15))
        assert bounds.start is None and bounds.end is None
        assert bounds.is_unbounded

    def test_unknown_tag_is_unbounded_not_an_error(self, caplog):
        bounds = resolve_date_range("last_fortnight", datetime(2024, 6, 15))
        assert bounds.is_unbounded
        assert "last_fortnight" in caplog.text

    @pytest.mark.parametrize("tag", ["today", "this_week", "this_month", "this_quarter", "this_year"])
    def test_bounded_ranges_are_ordered_and_contain_now(self, tag):
        now = datetime(2024, 11, 3, 14, 30)
        bounds = resolve_date_range(tag, now)
        assert bounds.start <= bounds.end
        assert bounds.contains(now)

    def test_period_labels(self):
        assert period_label("this_quarter") == "this quarter"
        assert period_label("since_inception") == "all time"
        assert period_label("bogus") == "all time"


class TestFilterRecords:
    def setup_method(self):
        self.bounds = ResolvedRange(
            start=datetime(2024, 3, 1),
            end=datetime(2024, 3, 31, 23, 59, 59, END_MS),
        )

    def test_keeps_records_inside_inclusive_bounds(self):
        records = [
            {"id": "a", "created_at": "2024-02-29T23:59:59"},
            {"id": "b", "created_at": "2024-03-01T00:00:00"},
            {"id": "c", "created_at": "2024-03-15T12:00:00"},
            {"id": "d", "created_at": "2024-03-31T23:59:59.999"},
            {"id": "e", "created_at": "2024-04-01T00:00:00"},
        ]
        kept = filter_records(records, self.bounds)
        assert [r["id"] for r in kept] == ["b", "c", "d"]

    def test_missing_or_unparseable_field_is_excluded(self):
        records = [
            {"id": "a"},
            {"id": "b", "created_at": None},
            {"id": "c", "created_at": "not a date"},
            {"id": "d", "created_at": "2024-03-02"},
        ]
        kept = filter_records(records, self.bounds)
        assert [r["id"] for r in kept] == ["d"]

    def test_preserves_input_order(self):
        records = [
            {"id": "late", "created_at": "2024-03-30"},
            {"id": "early", "created_at": "2024-03-02"},
            {"id": "mid", "created_at": "2024-03-15"},
        ]
        kept = filter_records(records, self.bounds)
        assert [r["id"] for r in kept] == ["late", "early", "mid"]

    def test_filters_models_on_selected_field(self):
        jobs = [
            Job(id="1", job_date="2024-03-10", created_at="2024-01-02"),
            Job(id="2", job_date="2024-05-10", created_at="2024-03-02"),
        ]
        assert [j.id for j in filter_records(jobs, self.bounds, "job_date")] == ["1"]
        assert [j.id for j in filter_records(jobs, self.bounds, "created_at")] == ["2"]

    def test_entry_date_field(self):
        entries = [{"id": "t1", "entry_date": "2024-03-05"}, {"id": "t2", "entry_date": "2024-06-05"}]
        kept = filter_records(entries, self.bounds, "entry_date")
        assert [e["id"] for e in kept] == ["t1"]

    def test_idempotent(self):
        records = [
            {"id": str(i), "created_at": f"2024-0{m}-10"}
            for i, m in enumerate([2, 3, 3, 4, 3])
        ]
        once = filter_records(records, self.bounds)
        twice = filter_records(once, self.bounds)
        assert twice == once

    def test_unbounded_returns_input_unchanged(self):
        records = [{"id": "x"}, {"id": "y", "created_at": "1999-01-01"}]
        result = filter_records(records, ResolvedRange())
        assert result is records

    def test_since_inception_by_tag(self):
        records = [{"id": "x"}]
        assert filter_by_date_range(records, "since_inception") is records

    def test_filter_by_tag_uses_now(self):
        records = [
            {"id": "in", "job_date": "2024-07-04"},
            {"id": "out", "job_date": "2024-06-30"},
        ]
        kept = filter_by_date_range(records, "this_month", "job_date", now=datetime(2024, 7, 20))
        assert [r["id"] for r in kept] == ["in"]

    def test_unsupported_field_rejected(self):
        with pytest.raises(ValueError):
            filter_records([], self.bounds, "updated_at")
