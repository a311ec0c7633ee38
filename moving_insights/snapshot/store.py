"""
Offline Snapshot Store — the last-fetched raw collections, kept locally.

Behavioral Contract:
- One named slot, overwritten wholesale on every save (last writer wins)
- A stored snapshot whose dataVersion differs from the current version is
  discarded on read, leaving the slot absent
- Storage and serialization failures are logged and reported as False/None,
  never raised
- Exporting without a snapshot is the one failure that raises

States: absent → present → stale (older than the threshold) → absent (clear).
Prototype: SQLite key-value table. One row per slot key.
"""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from pydantic import ValidationError

from moving_insights.models.coercion import parse_timestamp
from moving_insights.models.snapshot import OfflineSnapshot, SnapshotSizeInfo

logger = logging.getLogger(__name__)

DEFAULT_SLOT_KEY = "bantu_movers_offline_data"
DATA_VERSION = 1
DEFAULT_STALE_HOURS = 24
DEFAULT_MAX_BYTES = 5 * 1024 * 1024


class SnapshotUnavailableError(RuntimeError):
    """Raised when an operation needs a stored snapshot and there is none."""


def _plain(records: Optional[Iterable[Any]]) -> list:
    """Records as JSON-ready dicts; models are dumped, dicts kept as-is."""
    if not records:
        return []
    return [
        r.model_dump(mode="json", exclude_none=True) if hasattr(r, "model_dump") else r
        for r in records
    ]


def is_stale(
    snapshot: OfflineSnapshot,
    threshold_hours: float = DEFAULT_STALE_HOURS,
    now: Optional[datetime] = None,
) -> bool:
    """True when more than `threshold_hours` have passed since the last sync."""
    now = parse_timestamp(now) if now else datetime.now()
    elapsed_hours = (now - snapshot.last_sync).total_seconds() / 3600
    return elapsed_hours > threshold_hours


class OfflineSnapshotStore:
    """
    Single-slot offline cache. Construct one at startup and pass it to
    whoever needs it; tests use ":memory:".
    """

    def __init__(
        self,
        db_path: str = ":memory:",
        slot_key: str = DEFAULT_SLOT_KEY,
        data_version: int = DATA_VERSION,
        max_bytes: int = DEFAULT_MAX_BYTES,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.db_path = db_path
        self.slot_key = slot_key
        self.data_version = data_version
        self.max_bytes = max_bytes
        self.clock = clock
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        """Create the slot table if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS offline_slots (
                slot_key TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                saved_at TEXT NOT NULL
            )
        """)
        self._conn.commit()

    # --- Slot I/O ---

    def _read_payload(self) -> Optional[str]:
        row = self._conn.execute(
            "SELECT payload FROM offline_slots WHERE slot_key = ?", (self.slot_key,)
        ).fetchone()
        return row["payload"] if row else None

    def save(
        self,
        jobs: Optional[Iterable[Any]] = None,
        leads: Optional[Iterable[Any]] = None,
        clients: Optional[Iterable[Any]] = None,
        time_entries: Optional[Iterable[Any]] = None,
        employees: Optional[Iterable[Any]] = None,
    ) -> bool:
        """Stamp and overwrite the slot. Returns False on any storage failure."""
        try:
            snapshot = OfflineSnapshot(
                jobs=_plain(jobs),
                leads=_plain(leads),
                clients=_plain(clients),
                time_entries=_plain(time_entries),
                employees=_plain(employees),
                last_sync=self.clock(),
                data_version=self.data_version,
            )
            payload = snapshot.model_dump_json(by_alias=True)
        except (ValidationError, ValueError, TypeError):
            logger.exception("Failed to serialize offline snapshot")
            return False

        size = len(payload.encode("utf-8"))
        if size > self.max_bytes:
            logger.error(
                "Offline snapshot of %d bytes exceeds the %d byte quota", size, self.max_bytes
            )
            return False

        try:
            self._conn.execute(
                "INSERT OR REPLACE INTO offline_slots (slot_key, payload, saved_at) "
                "VALUES (?, ?, ?)",
                (self.slot_key, payload, snapshot.last_sync.isoformat()),
            )
            self._conn.commit()
        except sqlite3.Error:
            logger.exception("Failed to write offline snapshot")
            return False

        logger.info("Offline snapshot saved: %d records", snapshot.item_count)
        return True

    def load(self) -> Optional[OfflineSnapshot]:
        """The stored snapshot, or None when absent, incompatible or unreadable."""
        try:
            payload = self._read_payload()
        except sqlite3.Error:
            logger.exception("Failed to read offline snapshot")
            return None
        if payload is None:
            return None

        try:
            raw = json.loads(payload)
        except json.JSONDecodeError:
            logger.error("Offline snapshot is not valid JSON")
            return None

        if not isinstance(raw, dict) or raw.get("dataVersion") != self.data_version:
            logger.warning(
                "Offline snapshot version mismatch (stored %r, expected %d), clearing cache",
                raw.get("dataVersion") if isinstance(raw, dict) else None,
                self.data_version,
            )
            self.clear()
            return None

        try:
            return OfflineSnapshot.model_validate(raw)
        except ValidationError:
            logger.exception("Offline snapshot payload is invalid")
            return None

    def clear(self) -> bool:
        """Delete the slot. Clearing an absent slot succeeds."""
        try:
            self._conn.execute(
                "DELETE FROM offline_slots WHERE slot_key = ?", (self.slot_key,)
            )
            self._conn.commit()
        except sqlite3.Error:
            logger.exception("Failed to clear offline snapshot")
            return False
        logger.info("Offline snapshot cleared")
        return True

    # --- Inspection ---

    is_stale = staticmethod(is_stale)

    def size_info(self) -> SnapshotSizeInfo:
        """Serialized size (rounded KB) and total record count, for display."""
        snapshot = self.load()
        if snapshot is None:
            return SnapshotSizeInfo()
        size_bytes = len(snapshot.model_dump_json(by_alias=True).encode("utf-8"))
        return SnapshotSizeInfo(
            size_kb=round(size_bytes / 1024),
            item_count=snapshot.item_count,
        )

    def export_to_excel(self, output_dir: Optional[str] = None, **kwargs: Any) -> str:
        """
        Export the stored snapshot to a spreadsheet and return its filename.
        Raises SnapshotUnavailableError when nothing is stored.
        """
        snapshot = self.load()
        if snapshot is None:
            raise SnapshotUnavailableError("No offline data available")

        # Loaded lazily so the spreadsheet stack is only imported when exporting.
        from moving_insights.export.excel import export_financial_data_to_excel

        label = f"Offline Data (Last Sync: {snapshot.last_sync:%Y-%m-%d %H:%M:%S})"
        return export_financial_data_to_excel(
            jobs=snapshot.jobs,
            leads=snapshot.leads,
            clients=snapshot.clients,
            time_entries=snapshot.time_entries,
            employees=snapshot.employees,
            date_range_label=label,
            output_dir=Path(output_dir) if output_dir else None,
            **kwargs,
        )

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
