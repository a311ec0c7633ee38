"""Lead-source and month-by-month breakdowns shown alongside the KPIs."""

from typing import Any, Dict, Iterable, List

from moving_insights.analysis.fields import job_revenue
from moving_insights.models.records import Job, JobStatus, Lead, LeadStatus, parse_records
from moving_insights.models.report import PeriodTrend, SourcePerformance

UNKNOWN_SOURCE = "other"


def source_performance(leads: Iterable[Any], jobs: Iterable[Any]) -> List[SourcePerformance]:
    """
    Funnel results per lead source, best converting first.
    Revenue counts completed jobs linked to a converted lead by lead_id.
    """
    leads = parse_records(Lead, leads)
    jobs = parse_records(Job, jobs)

    completed_by_lead: Dict[str, Job] = {}
    for job in jobs:
        if job.lead_id and job.status == JobStatus.COMPLETED:
            completed_by_lead.setdefault(job.lead_id, job)

    by_source: Dict[str, SourcePerformance] = {}
    for lead in leads:
        source = lead.source or UNKNOWN_SOURCE
        row = by_source.setdefault(source, SourcePerformance(source=source))
        row.leads += 1
        if lead.status != LeadStatus.CONVERTED:
            continue
        row.conversions += 1
        job = completed_by_lead.get(lead.id) if lead.id else None
        if job is not None:
            row.revenue += job_revenue(job)

    for row in by_source.values():
        row.conversion_rate = row.conversions / row.leads * 100 if row.leads else 0.0

    return sorted(by_source.values(), key=lambda r: r.conversion_rate, reverse=True)


def monthly_trends(jobs: Iterable[Any], leads: Iterable[Any]) -> List[PeriodTrend]:
    """Completed-job revenue and lead volume per calendar month, oldest first."""
    jobs = parse_records(Job, jobs)
    leads = parse_records(Lead, leads)
    months: Dict[str, PeriodTrend] = {}

    for job in jobs:
        if job.status != JobStatus.COMPLETED or job.job_date is None:
            continue
        key = job.job_date.strftime("%Y-%m")
        row = months.setdefault(key, PeriodTrend(period=key))
        row.revenue += job_revenue(job)
        row.job_count += 1

    for lead in leads:
        if lead.created_at is None:
            continue
        key = lead.created_at.strftime("%Y-%m")
        row = months.setdefault(key, PeriodTrend(period=key))
        row.leads += 1
        if lead.status == LeadStatus.CONVERTED:
            row.conversions += 1

    return [months[key] for key in sorted(months)]
