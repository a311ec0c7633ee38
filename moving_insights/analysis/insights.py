"""
Insight Generator — compares metrics against moving-industry benchmarks.

Rules are evaluated in a fixed order and are independent of each other:
revenue, profitability, marketing, retention, scaling readiness. Each rule
that fires contributes one BusinessInsight; the output keeps rule order.
"""

from typing import Callable, Iterable, List, Optional

from moving_insights.models.insight import (
    BusinessInsight,
    InsightCategory,
    InsightMetric,
    InsightPriority,
)
from moving_insights.models.metrics import BusinessMetrics

# Industry benchmarks
MIN_AVERAGE_JOB_VALUE = 400
MIN_PROFIT_MARGIN = 25
MIN_CONVERSION_RATE = 35
MIN_REPEAT_CUSTOMER_RATE = 20
SCALE_MIN_TOTAL_JOBS = 50
SCALE_MIN_COMPLETED_JOBS = 40


def _money(value: float) -> str:
    return f"${value:,.0f}"


def _pct(value: float) -> str:
    return f"{value:.1f}%"


def _job_value_insight(metrics: BusinessMetrics, period: str) -> Optional[BusinessInsight]:
    if metrics.average_job_value >= MIN_AVERAGE_JOB_VALUE:
        return None
    value = _money(metrics.average_job_value)
    return BusinessInsight(
        category=InsightCategory.REVENUE,
        priority=InsightPriority.HIGH,
        title="Below Industry Average Job Value",
        description=(
            f"Your average job value of {value} for {period} is below the "
            f"moving industry average of $400-600."
        ),
        impact="Limiting revenue growth potential and profit margins",
        recommendation=(
            "Implement tiered pricing: Basic ($350), Standard ($450), Premium ($600+). "
            "Add value-added services like packing, storage, and furniture assembly."
        ),
        expected_outcome="25-40% increase in average job value within 3 months",
        timeframe="2-3 months",
        metrics=[
            InsightMetric(label="Current Average", value=value),
            InsightMetric(label="Industry Target", value="$450-600"),
        ],
    )


def _margin_insight(metrics: BusinessMetrics, period: str) -> Optional[BusinessInsight]:
    if metrics.profit_margin >= MIN_PROFIT_MARGIN:
        return None
    return BusinessInsight(
        category=InsightCategory.PROFITABILITY,
        priority=InsightPriority.CRITICAL,
        title="Low Profit Margins - Industry Risk",
        description=(
            f"A {_pct(metrics.profit_margin)} profit margin for {period} is below "
            f"healthy moving company standards (25-35%)."
        ),
        impact="Business sustainability at risk, limited growth capital",
        recommendation=(
            "Immediate action: 1) Increase rates by 15-20%, 2) Optimize crew efficiency, "
            "3) Reduce overtime through better scheduling, 4) Negotiate better supply costs."
        ),
        expected_outcome="Target 25% profit margin within 90 days",
        timeframe="60-90 days",
        metrics=[
            InsightMetric(label="Current Margin", value=_pct(metrics.profit_margin)),
            InsightMetric(label="Net Profit", value=_money(metrics.net_profit)),
            InsightMetric(label="Industry Target", value="25-35%"),
        ],
    )


def _conversion_insight(metrics: BusinessMetrics, period: str) -> Optional[BusinessInsight]:
    if metrics.conversion_rate >= MIN_CONVERSION_RATE:
        return None
    return BusinessInsight(
        category=InsightCategory.MARKETING,
        priority=InsightPriority.HIGH,
        title="Low Lead Conversion Rate",
        description=(
            f"A {_pct(metrics.conversion_rate)} conversion rate for {period} is below "
            f"the moving industry average (35-45%)."
        ),
        impact="Wasting marketing spend and losing potential revenue",
        recommendation=(
            "Respond to quote requests within 2 hours, publish a pricing calculator, "
            "run follow-up sequences and train staff on objection handling."
        ),
        expected_outcome="Increase conversion rate to 35%+",
        timeframe="6-8 weeks",
        metrics=[
            InsightMetric(label="Conversion Rate", value=_pct(metrics.conversion_rate)),
            InsightMetric(label="Industry Target", value="35-45%"),
        ],
    )


def _retention_insight(metrics: BusinessMetrics, period: str) -> Optional[BusinessInsight]:
    if metrics.repeat_customer_rate >= MIN_REPEAT_CUSTOMER_RATE:
        return None
    return BusinessInsight(
        category=InsightCategory.OPERATIONS,
        priority=InsightPriority.MEDIUM,
        title="Low Customer Retention",
        description=(
            f"A {_pct(metrics.repeat_customer_rate)} repeat customer rate for {period} "
            f"is below the moving industry target (20-25%)."
        ),
        impact="Higher acquisition costs and missed revenue opportunities",
        recommendation=(
            "Set up post-move follow-ups, build corporate relocation partnerships, "
            "offer storage services and send seasonal move reminders."
        ),
        expected_outcome="Increase repeat business to 20%+",
        timeframe="4-6 months",
        metrics=[
            InsightMetric(label="Repeat Rate", value=_pct(metrics.repeat_customer_rate)),
            InsightMetric(label="Industry Target", value="20-25%"),
        ],
    )


def _scale_insight(metrics: BusinessMetrics, period: str) -> Optional[BusinessInsight]:
    if not (
        metrics.total_jobs > SCALE_MIN_TOTAL_JOBS
        and metrics.completed_jobs > SCALE_MIN_COMPLETED_JOBS
    ):
        return None
    return BusinessInsight(
        category=InsightCategory.WORKFORCE,
        priority=InsightPriority.MEDIUM,
        title="Ready to Scale Operations",
        description=(
            f"With {metrics.total_jobs} jobs booked and {metrics.completed_jobs} completed "
            f"for {period}, demand supports adding another crew."
        ),
        impact="Demand is outgrowing current crew capacity",
        recommendation=(
            "Hire and train an additional crew, add a second truck for peak days, "
            "and standardize job checklists so new movers ramp up quickly."
        ),
        expected_outcome="20-30% more jobs completed per month",
        timeframe="3-6 months",
        metrics=[
            InsightMetric(label="Total Jobs", value=metrics.total_jobs),
            InsightMetric(label="Completed Jobs", value=metrics.completed_jobs),
            InsightMetric(label="Active Employees", value=metrics.employee_utilization),
        ],
    )


Rule = Callable[[BusinessMetrics, str], Optional[BusinessInsight]]

RULES: List[Rule] = [
    _job_value_insight,
    _margin_insight,
    _conversion_insight,
    _retention_insight,
    _scale_insight,
]


class InsightGenerator:
    """Evaluates every benchmark rule against a metrics record."""

    def __init__(self, rules: Optional[Iterable[Rule]] = None):
        self.rules = list(rules) if rules is not None else list(RULES)

    def generate(self, metrics: BusinessMetrics, period_label: str) -> List[BusinessInsight]:
        insights = []
        for rule in self.rules:
            insight = rule(metrics, period_label)
            if insight is not None:
                insights.append(insight)
        return insights


def generate_insights(metrics: BusinessMetrics, period_label: str) -> List[BusinessInsight]:
    """Functional entry point for InsightGenerator.generate."""
    return InsightGenerator().generate(metrics, period_label)
