"""Runtime configuration and logging setup."""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_PREFIX = "MOVING_INSIGHTS_"


class AnalyticsConfig(BaseModel):
    """Configuration for the analytics service and its offline snapshot."""

    snapshot_db_path: str = ":memory:"
    snapshot_slot_key: str = "bantu_movers_offline_data"
    data_version: int = 1
    stale_threshold_hours: float = Field(gt=0, default=24)
    max_snapshot_bytes: int = Field(gt=0, default=5 * 1024 * 1024)   # Local storage quota
    export_dir: str = "."
    company_name: str = "Bantu_Movers"
    snapshot_on_analysis: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "AnalyticsConfig":
        """Build a config from MOVING_INSIGHTS_* variables (and a .env file if present)."""
        load_dotenv(dotenv_path=env_file)
        values = {}
        for name in cls.model_fields:
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw
        return cls.model_validate(values)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    root.setLevel(level.upper())
