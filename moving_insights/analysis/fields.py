"""
Field fallback rules used by the metrics aggregator.

Historical rows are often incomplete, so every derived value is read through
one of these helpers. Each helper owns exactly one fallback chain.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List

from moving_insights.models.coercion import coerce_number
from moving_insights.models.records import Job, PricingModel, TimeEntry


def to_number(value: Any) -> float:
    """Missing or non-numeric values count as zero."""
    return coerce_number(value) or 0.0


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero (2.5 -> 3), unlike the built-in round()."""
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded)


def is_flat_rate(job: Job) -> bool:
    return job.pricing_model == PricingModel.FLAT_RATE


def job_revenue(job: Job) -> float:
    """
    Revenue booked for a job.
    Flat-rate: amount actually received. Otherwise: actual total, else estimate.
    """
    if is_flat_rate(job):
        return to_number(job.total_amount_received)
    return to_number(job.actual_total) or to_number(job.estimated_total)


def movers_on_job(job: Job) -> float:
    """Planned crew size; a job always has at least one mover."""
    return to_number(job.movers_needed) or 1.0


def flat_rate_labor_cost(job: Job) -> float:
    """Contract-terms labor cost: rate x hours x movers."""
    return to_number(job.worker_hourly_rate) * to_number(job.hours_worked) * movers_on_job(job)


def time_entry_pay(entry: TimeEntry) -> float:
    return to_number(entry.total_pay)


def pay_by_job(time_entries: Iterable[TimeEntry]) -> Dict[str, float]:
    """Sum logged pay per job_id. Entries without a job are ignored."""
    totals: Dict[str, float] = {}
    for entry in time_entries:
        if entry.job_id is None:
            continue
        totals[entry.job_id] = totals.get(entry.job_id, 0.0) + time_entry_pay(entry)
    return totals


def job_labor_cost(job: Job, logged_pay: Dict[str, float]) -> float:
    """
    Labor cost for one job.

    Flat-rate jobs have no time entries; cost comes from the contract terms.
    Per-person jobs are costed from the pay actually logged against them.
    """
    if is_flat_rate(job):
        return flat_rate_labor_cost(job)
    if job.id is None:
        return 0.0
    return logged_pay.get(job.id, 0.0)


def job_duration_hours(job: Job) -> float:
    """Actual duration, else hours worked, else the estimate. Zero when all absent."""
    return (
        to_number(job.actual_duration_hours)
        or to_number(job.hours_worked)
        or to_number(job.estimated_duration_hours)
    )


def entry_hours(entry: TimeEntry) -> float:
    return to_number(entry.regular_hours) + to_number(entry.overtime_hours)


def nonzero(values: Iterable[float]) -> List[float]:
    return [v for v in values if v != 0]
