"""
Metrics Aggregator — raw collections in, BusinessMetrics out.

Behavioral Contract:
- Pure: never mutates its inputs, never touches storage
- Revenue, labor cost and lead cost are all taken over completed jobs
- Labor cost follows the job's pricing model: contract terms for flat-rate
  jobs, logged time-entry pay for per-person jobs
- Missing or non-numeric values count as zero; nothing here raises on bad data
"""

import logging
from typing import Any, Iterable, List, Optional

from moving_insights.analysis.fields import (
    entry_hours,
    job_duration_hours,
    job_labor_cost,
    job_revenue,
    nonzero,
    pay_by_job,
    round_half_up,
    to_number,
)
from moving_insights.models.metrics import BusinessMetrics
from moving_insights.models.records import (
    Client,
    Employee,
    EmployeeStatus,
    Job,
    JobStatus,
    Lead,
    LeadStatus,
    TimeEntry,
    parse_records,
)

logger = logging.getLogger(__name__)


def _ratio(part: float, whole: float) -> float:
    return part / whole if whole > 0 else 0.0


def _percent(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class MetricsAggregator:
    """Computes the fixed KPI set for one batch of records."""

    def aggregate(
        self,
        jobs: Iterable[Any],
        leads: Iterable[Any],
        clients: Iterable[Any],
        time_entries: Iterable[Any],
        employees: Iterable[Any],
    ) -> BusinessMetrics:
        jobs = parse_records(Job, jobs)
        leads = parse_records(Lead, leads)
        clients = parse_records(Client, clients)
        time_entries = parse_records(TimeEntry, time_entries)
        employees = parse_records(Employee, employees)

        completed = [j for j in jobs if j.status == JobStatus.COMPLETED]
        cancelled = [j for j in jobs if j.status == JobStatus.CANCELLED]
        converted = [lead for lead in leads if lead.status == LeadStatus.CONVERTED]

        # --- Revenue ---
        revenue_raw = sum(job_revenue(j) for j in completed)
        paid_raw = sum(job_revenue(j) for j in completed if j.is_paid)
        total_revenue = round_half_up(revenue_raw)
        paid_revenue = round_half_up(paid_raw)

        # --- Costs ---
        logged_pay = pay_by_job(time_entries)
        labor_cost = sum(job_labor_cost(j, logged_pay) for j in completed)
        lead_cost_raw = sum(to_number(j.lead_cost) for j in completed)
        total_lead_cost = round_half_up(lead_cost_raw)
        total_expenses = round_half_up(labor_cost + total_lead_cost)
        net_profit = round_half_up(total_revenue - total_expenses)

        profit_margin = 0.0
        if total_revenue > 0:
            profit_margin = round_half_up(net_profit / total_revenue * 100, 2)

        # --- Marketing (lead-side spend) ---
        spend_on_leads = sum(to_number(lead.lead_cost) for lead in leads)
        marketing_roi = 0.0
        if spend_on_leads > 0:
            marketing_roi = round_half_up((total_revenue - labor_cost) / spend_on_leads * 100, 2)

        # --- Operations ---
        durations = nonzero(job_duration_hours(j) for j in completed)
        ratings = nonzero(to_number(j.customer_satisfaction) for j in jobs)
        repeat_clients = [c for c in clients if to_number(c.total_jobs_completed) > 1]

        # --- Workforce ---
        active = [e for e in employees if e.status == EmployeeStatus.ACTIVE]
        rated = [to_number(t.hourly_rate) for t in time_entries if to_number(t.hourly_rate) > 0]
        overtime = sum(to_number(t.overtime_hours) for t in time_entries)
        logged_hours = sum(entry_hours(t) for t in time_entries)
        roster = len(employees)

        metrics = BusinessMetrics(
            total_jobs=len(jobs),
            completed_jobs=len(completed),
            cancelled_jobs=len(cancelled),
            total_revenue=total_revenue,
            paid_revenue=paid_revenue,
            unpaid_revenue=round_half_up(revenue_raw - paid_raw),
            total_labor_cost=round_half_up(labor_cost, 2),
            total_lead_cost=total_lead_cost,
            total_expenses=total_expenses,
            net_profit=net_profit,
            profit_margin=profit_margin,
            average_job_value=total_revenue / len(completed) if completed else 0.0,
            revenue_per_hour=round_half_up(_ratio(total_revenue, sum(durations)), 2),
            cost_per_job=round_half_up(_ratio(total_expenses, len(completed)), 2),
            labor_cost_ratio=round_half_up(_percent(labor_cost, total_revenue), 2),
            total_leads=len(leads),
            converted_leads=len(converted),
            conversion_rate=_percent(len(converted), len(leads)),
            cost_per_lead=spend_on_leads / len(leads) if leads else 0.0,
            cost_per_acquisition=spend_on_leads / len(converted) if converted else 0.0,
            marketing_roi=marketing_roi,
            job_completion_rate=_percent(len(completed), len(jobs)),
            cancellation_rate=_percent(len(cancelled), len(jobs)),
            average_job_duration=round_half_up(_mean(durations), 2),
            repeat_customer_rate=round_half_up(_percent(len(repeat_clients), len(clients)), 2),
            customer_satisfaction_average=round_half_up(_mean(ratings), 2),
            # Literal count of active employees despite the name.
            employee_utilization=len(active),
            average_hourly_rate=_mean(rated),
            overtime_percentage=_percent(overtime, logged_hours),
            productivity_per_employee=round_half_up(_ratio(total_revenue, roster), 2),
            employee_turnover=round_half_up(_percent(roster - len(active), roster), 2),
            average_jobs_per_employee=round_half_up(_ratio(len(completed), roster), 2),
        )

        logger.debug(
            "Aggregated %d jobs (%d completed), %d leads, %d clients: revenue=%s net=%s",
            len(jobs), len(completed), len(leads), len(clients),
            metrics.total_revenue, metrics.net_profit,
        )
        return metrics


def analyze_business_metrics(
    jobs: Iterable[Any],
    leads: Iterable[Any],
    clients: Iterable[Any],
    time_entries: Iterable[Any],
    employees: Iterable[Any],
    aggregator: Optional[MetricsAggregator] = None,
) -> BusinessMetrics:
    """Functional entry point for MetricsAggregator.aggregate."""
    return (aggregator or MetricsAggregator()).aggregate(
        jobs, leads, clients, time_entries, employees
    )
