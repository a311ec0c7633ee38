"""Business Metrics — derived KPIs, recomputed on every request and never persisted."""

from pydantic import BaseModel


class BusinessMetrics(BaseModel):
    """Flat record of financial and operational KPIs for one reporting period."""

    # Job counts
    total_jobs: int = 0
    completed_jobs: int = 0
    cancelled_jobs: int = 0

    # Revenue and cost (whole currency units)
    total_revenue: float = 0
    paid_revenue: float = 0
    unpaid_revenue: float = 0
    total_labor_cost: float = 0
    total_lead_cost: float = 0
    total_expenses: float = 0
    net_profit: float = 0
    profit_margin: float = 0                # Percent, 2 decimals
    average_job_value: float = 0
    revenue_per_hour: float = 0             # Over completed-job hours
    cost_per_job: float = 0
    labor_cost_ratio: float = 0             # Percent of revenue

    # Marketing
    total_leads: int = 0
    converted_leads: int = 0
    conversion_rate: float = 0              # Percent
    cost_per_lead: float = 0
    cost_per_acquisition: float = 0
    marketing_roi: float = 0                # Percent return on lead spend

    # Operations
    job_completion_rate: float = 0          # Percent
    cancellation_rate: float = 0            # Percent
    average_job_duration: float = 0         # Hours, 2 decimals
    repeat_customer_rate: float = 0         # Percent, 2 decimals
    customer_satisfaction_average: float = 0   # Rated jobs only

    # Workforce
    employee_utilization: int = 0           # Count of active employees, not a percentage
    average_hourly_rate: float = 0
    overtime_percentage: float = 0
    productivity_per_employee: float = 0    # Revenue per employee on the roster
    employee_turnover: float = 0            # Percent of roster not active
    average_jobs_per_employee: float = 0
