"""
Moving Insights API — FastAPI endpoints.

Exposes the analytics core to the dashboard UI:
- Period resolution
- Live analysis of freshly fetched collections
- Offline snapshot management and analysis
- Spreadsheet export of the offline snapshot
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from moving_insights.analysis.service import BusinessAnalysisService
from moving_insights.config import AnalyticsConfig, configure_logging
from moving_insights.models.period import DateRange
from moving_insights.periods.resolver import period_label, resolve_date_range
from moving_insights.snapshot.store import OfflineSnapshotStore, SnapshotUnavailableError

logger = logging.getLogger(__name__)


# --- Request/Response Models ---

class CollectionsRequest(BaseModel):
    jobs: List[dict] = []
    leads: List[dict] = []
    clients: List[dict] = []
    time_entries: List[dict] = []
    employees: List[dict] = []


class AnalysisRequest(CollectionsRequest):
    date_range: str = DateRange.SINCE_INCEPTION.value


class SaveSnapshotResponse(BaseModel):
    saved: bool


class ExportResponse(BaseModel):
    filename: str


# --- Application Factory ---

def create_app(
    snapshot_store: Optional[OfflineSnapshotStore] = None,
    analysis_service: Optional[BusinessAnalysisService] = None,
    config: Optional[AnalyticsConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    config = config or AnalyticsConfig()
    configure_logging(config.log_level)

    app = FastAPI(
        title="Moving Insights API",
        description="Business metrics and insights for a moving company",
        version="0.1.0",
    )

    store = snapshot_store or OfflineSnapshotStore(
        db_path=config.snapshot_db_path,
        slot_key=config.snapshot_slot_key,
        data_version=config.data_version,
        max_bytes=config.max_snapshot_bytes,
    )
    service = analysis_service or BusinessAnalysisService()

    # Store components on app state for access in endpoints
    app.state.config = config
    app.state.snapshot_store = store
    app.state.analysis_service = service

    @app.get("/health")
    def health():
        return {"status": "ok", "time": datetime.now().isoformat()}

    # === PERIODS ===

    @app.get("/ranges/{date_range}")
    def get_range(date_range: str):
        """Concrete bounds of a symbolic period."""
        bounds = resolve_date_range(date_range)
        return {
            "date_range": date_range,
            "label": period_label(date_range),
            "bounds": bounds.model_dump(mode="json"),
        }

    # === LIVE ANALYSIS ===

    @app.post("/analysis")
    def analyze(req: AnalysisRequest):
        """Metrics and insights for freshly fetched collections."""
        if config.snapshot_on_analysis:
            saved = store.save(
                jobs=req.jobs,
                leads=req.leads,
                clients=req.clients,
                time_entries=req.time_entries,
                employees=req.employees,
            )
            if not saved:
                logger.warning("Analysis served without refreshing the offline snapshot")

        report = service.analyze(
            jobs=req.jobs,
            leads=req.leads,
            clients=req.clients,
            time_entries=req.time_entries,
            employees=req.employees,
            date_range=req.date_range,
        )
        return report.model_dump(mode="json")

    # === OFFLINE SNAPSHOT ===

    @app.post("/offline/snapshot", response_model=SaveSnapshotResponse)
    def save_snapshot(req: CollectionsRequest):
        """Replace the offline snapshot."""
        saved = store.save(
            jobs=req.jobs,
            leads=req.leads,
            clients=req.clients,
            time_entries=req.time_entries,
            employees=req.employees,
        )
        return SaveSnapshotResponse(saved=saved)

    @app.get("/offline/snapshot")
    def get_snapshot():
        """The stored snapshot with its staleness flag."""
        snapshot = store.load()
        if snapshot is None:
            raise HTTPException(404, "No offline data available")
        data = snapshot.model_dump(mode="json", by_alias=True)
        data["stale"] = store.is_stale(snapshot, config.stale_threshold_hours)
        return data

    @app.delete("/offline/snapshot")
    def clear_snapshot():
        """Discard the offline snapshot."""
        return {"cleared": store.clear()}

    @app.get("/offline/size")
    def snapshot_size():
        """Stored size and record count."""
        return store.size_info().model_dump()

    @app.get("/offline/analysis")
    def analyze_offline(date_range: str = DateRange.SINCE_INCEPTION.value):
        """Metrics and insights from the offline snapshot."""
        snapshot = store.load()
        if snapshot is None:
            raise HTTPException(404, "No offline data available")
        report = service.analyze(
            jobs=snapshot.jobs,
            leads=snapshot.leads,
            clients=snapshot.clients,
            time_entries=snapshot.time_entries,
            employees=snapshot.employees,
            date_range=date_range,
        )
        data = report.model_dump(mode="json")
        data["last_sync"] = snapshot.last_sync.isoformat()
        data["stale"] = store.is_stale(snapshot, config.stale_threshold_hours)
        return data

    @app.post("/offline/export", response_model=ExportResponse)
    def export_snapshot():
        """Write the offline snapshot to a spreadsheet."""
        try:
            filename = store.export_to_excel(
                output_dir=config.export_dir,
                company_name=config.company_name,
            )
        except SnapshotUnavailableError as e:
            raise HTTPException(404, str(e))
        return ExportResponse(filename=filename)

    return app


_default_app: Optional[FastAPI] = None


def get_app() -> FastAPI:
    """The environment-configured application, built on first use."""
    global _default_app
    if _default_app is None:
        _default_app = create_app(config=AnalyticsConfig.from_env())
    return _default_app


def __getattr__(name: str):
    # `moving_insights.api.app:app` resolves here, so importing reads no environment.
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
