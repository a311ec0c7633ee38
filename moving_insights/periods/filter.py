"""Record Filter — keeps the records whose timestamp falls inside a period."""

import logging
from datetime import datetime
from typing import Any, Optional, Sequence, TypeVar, Union

from moving_insights.models.coercion import parse_timestamp
from moving_insights.models.period import DateRange, ResolvedRange
from moving_insights.periods.resolver import resolve_date_range

logger = logging.getLogger(__name__)

DATE_FIELDS = ("created_at", "job_date", "entry_date")

RecordT = TypeVar("RecordT")


def record_timestamp(record: Any, date_field: str) -> Optional[datetime]:
    """Read a timestamp column from a record model or a plain dict."""
    if isinstance(record, dict):
        raw = record.get(date_field)
    else:
        raw = getattr(record, date_field, None)
    return parse_timestamp(raw)


def filter_records(
    records: Sequence[RecordT],
    resolved: ResolvedRange,
    date_field: str = "created_at",
) -> Sequence[RecordT]:
    """
    Stable filter on `date_field` within the inclusive bounds.

    An unbounded range returns `records` itself. Records without a usable
    timestamp fall outside any bounded range.
    """
    if date_field not in DATE_FIELDS:
        raise ValueError(f"Unsupported date field: {date_field}")

    if resolved.is_unbounded:
        return records

    kept = []
    skipped = 0
    for record in records:
        moment = record_timestamp(record, date_field)
        if moment is None:
            skipped += 1
            continue
        if resolved.start <= moment <= resolved.end:
            kept.append(record)

    if skipped:
        logger.debug("Skipped %d records without a usable %s", skipped, date_field)
    return kept


def filter_by_date_range(
    records: Sequence[RecordT],
    date_range: Union[DateRange, str, None],
    date_field: str = "created_at",
    now: Optional[datetime] = None,
) -> Sequence[RecordT]:
    """Resolve `date_range` against `now`, then filter."""
    return filter_records(records, resolve_date_range(date_range, now), date_field)
