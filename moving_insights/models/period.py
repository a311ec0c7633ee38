"""Reporting periods and their resolved datetime bounds."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class DateRange(str, Enum):
    TODAY = "today"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    THIS_QUARTER = "this_quarter"
    THIS_YEAR = "this_year"
    SINCE_INCEPTION = "since_inception"


class ResolvedRange(BaseModel):
    """Inclusive [start, end] interval. Both None means no filtering."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_unbounded(self) -> bool:
        return self.start is None or self.end is None

    def contains(self, moment: datetime) -> bool:
        if self.is_unbounded:
            return True
        return self.start <= moment <= self.end
