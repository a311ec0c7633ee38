"""Raw business records — read-only rows handed over by the persistence layer."""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from moving_insights.models.coercion import coerce_flag, coerce_number, coerce_text, parse_timestamp

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    PENDING_SCHEDULE = "pending_schedule"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PricingModel(str, Enum):
    FLAT_RATE = "flat_rate"     # Pre-negotiated total, labor cost from contract terms
    PER_PERSON = "per_person"   # Hourly per worker, labor cost from time entries


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUOTED = "quoted"
    CONVERTED = "converted"
    LOST = "lost"


class LeadSource(str, Enum):
    GOOGLE = "google"
    FACEBOOK = "facebook"
    REFERRAL = "referral"
    WEBSITE = "website"
    YELP = "yelp"
    THUMBTACK = "thumbtack"
    ANGI = "angi"
    OTHER = "other"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class BaseRecord(BaseModel):
    """
    Common behaviour for persisted rows.

    Rows carry more columns than the analytics need, so extra fields are kept.
    Status/source columns are plain strings compared against the str enums
    above, so an unknown value from an older schema never fails validation.
    Every text column (ids, names, phones, codes) also accepts numbers.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    created_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _stringify_text_columns(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for name, field in cls.model_fields.items():
            if name in data and field.annotation == Optional[str]:
                data[name] = coerce_text(data[name])
        return data

    @field_validator("created_at", mode="before")
    @classmethod
    def _lenient_created_at(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)


class Job(BaseRecord):
    """A booked move."""

    status: Optional[str] = None                    # JobStatus value
    pricing_model: Optional[str] = None             # PricingModel value
    estimated_total: Optional[float] = None
    actual_total: Optional[float] = None
    total_amount_received: Optional[float] = None   # Flat-rate revenue
    worker_hourly_rate: Optional[float] = None      # Flat-rate labor terms
    hourly_rate: Optional[float] = None             # Billed rate for per-person jobs
    lead_cost: Optional[float] = None
    job_date: Optional[datetime] = None
    hours_worked: Optional[float] = None
    movers_needed: Optional[float] = None
    actual_duration_hours: Optional[float] = None
    estimated_duration_hours: Optional[float] = None
    is_paid: bool = False
    lead_id: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    job_number: Optional[str] = None
    customer_satisfaction: Optional[float] = None   # Post-move rating, unrated when absent

    @field_validator(
        "estimated_total",
        "actual_total",
        "total_amount_received",
        "worker_hourly_rate",
        "hourly_rate",
        "lead_cost",
        "hours_worked",
        "movers_needed",
        "actual_duration_hours",
        "estimated_duration_hours",
        "customer_satisfaction",
        mode="before",
    )
    @classmethod
    def _lenient_number(cls, value: Any) -> Optional[float]:
        return coerce_number(value)

    @field_validator("job_date", mode="before")
    @classmethod
    def _lenient_job_date(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @field_validator("is_paid", mode="before")
    @classmethod
    def _lenient_flag(cls, value: Any) -> bool:
        return coerce_flag(value)


class Lead(BaseRecord):
    """A prospective customer inquiry."""

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    status: Optional[str] = None                    # LeadStatus value
    source: Optional[str] = None                    # LeadSource value
    estimated_value: Optional[float] = None
    lead_cost: Optional[float] = None
    notes: Optional[str] = None                     # Append-only, timestamped entries

    @field_validator("estimated_value", "lead_cost", mode="before")
    @classmethod
    def _lenient_number(cls, value: Any) -> Optional[float]:
        return coerce_number(value)


class Client(BaseRecord):
    """A customer. May correspond to one Lead by name+phone (soft join)."""

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    company_name: Optional[str] = None
    total_jobs_completed: Optional[float] = None
    total_revenue: Optional[float] = None

    @field_validator("total_jobs_completed", "total_revenue", mode="before")
    @classmethod
    def _lenient_number(cls, value: Any) -> Optional[float]:
        return coerce_number(value)


class TimeEntry(BaseRecord):
    """One clock-in/clock-out span for an employee, optionally tied to a job."""

    employee_id: Optional[str] = None
    job_id: Optional[str] = None
    entry_date: Optional[datetime] = None
    clock_in_time: Optional[datetime] = None
    clock_out_time: Optional[datetime] = None
    regular_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    hourly_rate: Optional[float] = None
    overtime_rate: Optional[float] = None
    total_pay: Optional[float] = None
    tip_amount: Optional[float] = None
    is_paid: bool = False
    status: Optional[str] = None

    @field_validator(
        "regular_hours",
        "overtime_hours",
        "hourly_rate",
        "overtime_rate",
        "total_pay",
        "tip_amount",
        mode="before",
    )
    @classmethod
    def _lenient_number(cls, value: Any) -> Optional[float]:
        return coerce_number(value)

    @field_validator("entry_date", "clock_in_time", "clock_out_time", mode="before")
    @classmethod
    def _lenient_timestamp(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @field_validator("is_paid", mode="before")
    @classmethod
    def _lenient_flag(cls, value: Any) -> bool:
        return coerce_flag(value)

    @model_validator(mode="after")
    def _check_clock_order(self) -> "TimeEntry":
        if (
            self.clock_in_time is not None
            and self.clock_out_time is not None
            and self.clock_out_time <= self.clock_in_time
        ):
            logger.warning(
                "Time entry %s clocks out at %s, not after clock-in %s",
                self.id, self.clock_out_time, self.clock_in_time,
            )
        return self


class Employee(BaseRecord):
    """A crew member."""

    name: Optional[str] = None
    employee_number: Optional[str] = None
    hourly_wage: Optional[float] = None
    status: Optional[str] = None                    # EmployeeStatus value

    @field_validator("hourly_wage", mode="before")
    @classmethod
    def _lenient_number(cls, value: Any) -> Optional[float]:
        return coerce_number(value)


RecordT = TypeVar("RecordT", bound=BaseRecord)


def parse_records(model: Type[RecordT], items: Optional[Iterable[Any]]) -> List[RecordT]:
    """Validate raw rows into record models. Model instances pass through."""
    if not items:
        return []
    return [
        item if isinstance(item, model) else model.model_validate(item)
        for item in items
    ]
