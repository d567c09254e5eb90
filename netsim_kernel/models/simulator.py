"""Simulator configuration."""

import os
from typing import Optional

from pydantic import BaseModel, Field, model_validator

ENV_PREFIX = "NETSIM_"


class SimulatorConfig(BaseModel):
    """Configuration for the metric simulator and its history store."""

    history_capacity: int = Field(ge=1, default=50)
    warning_threshold: float = 75.0
    critical_threshold: float = 90.0
    history_db_path: Optional[str] = None   # None keeps history in memory only
    history_timeout_seconds: float = Field(gt=0, default=5.0)
    topology_dir: Optional[str] = None      # Directory holding networks/<id>.json
    generate_missing_networks: bool = True
    diff_include_history: bool = True

    @model_validator(mode="after")
    def _check_thresholds(self) -> "SimulatorConfig":
        if self.critical_threshold < self.warning_threshold:
            raise ValueError("critical_threshold must not be below warning_threshold")
        return self

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "SimulatorConfig":
        """Build a config from NETSIM_* environment variables."""
        environ = os.environ if environ is None else environ
        names = {
            "HISTORY_DB": "history_db_path",
            "HISTORY_CAPACITY": "history_capacity",
            "HISTORY_TIMEOUT": "history_timeout_seconds",
            "TOPOLOGY_DIR": "topology_dir",
            "GENERATE_MISSING": "generate_missing_networks",
            "WARNING_THRESHOLD": "warning_threshold",
            "CRITICAL_THRESHOLD": "critical_threshold",
            "DIFF_INCLUDE_HISTORY": "diff_include_history",
        }
        values = {
            field: environ[ENV_PREFIX + key]
            for key, field in names.items()
            if environ.get(ENV_PREFIX + key)
        }
        return cls.model_validate(values)
