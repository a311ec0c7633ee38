"""Offline Snapshot — the last-fetched raw collections kept in a local slot."""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from moving_insights.models.coercion import parse_timestamp


class OfflineSnapshot(BaseModel):
    """
    The whole slot payload. Overwritten wholesale on every save, never merged.

    Serialized with aliases so the stored JSON reads
    {jobs, leads, clients, timeEntries, employees, lastSync, dataVersion}.
    """

    model_config = ConfigDict(populate_by_name=True)

    jobs: List[dict] = []
    leads: List[dict] = []
    clients: List[dict] = []
    time_entries: List[dict] = Field(default=[], alias="timeEntries")
    employees: List[dict] = []
    last_sync: datetime = Field(alias="lastSync")
    data_version: int = Field(alias="dataVersion")

    @field_validator("last_sync", mode="before")
    @classmethod
    def _local_last_sync(cls, value: Any) -> Optional[datetime]:
        # Naive local time, like every record timestamp.
        return parse_timestamp(value)

    @property
    def item_count(self) -> int:
        return (
            len(self.jobs)
            + len(self.leads)
            + len(self.clients)
            + len(self.time_entries)
            + len(self.employees)
        )


class SnapshotSizeInfo(BaseModel):
    size_kb: int = 0
    item_count: int = 0
