from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

_KNOWN_KEYS = {"max_at_once", "log_level", "log_file", "progress_interval"}


@dataclass
class PoolConfig:
    """Settings shared by pool entry points.

    Attributes:
        max_at_once: Maximum concurrent jobs
        log_level: Logging level name
        log_file: Optional log file path; stderr when unset
        progress_interval: Log progress every N results
        extra: Unrecognised keys from a config file
    """

    max_at_once: int = 10
    log_level: str = "INFO"
    log_file: Optional[str] = None
    progress_interval: int = 10
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.max_at_once < 1:
            raise ValueError(f"max_at_once must be at least 1, got {self.max_at_once}")


def load_pool_config(path: str | Path) -> PoolConfig:
    data = yaml.safe_load(Path(path).read_text()) or {}
    defaults = PoolConfig()
    return PoolConfig(
        max_at_once=int(data.get("max_at_once", defaults.max_at_once)),
        log_level=str(data.get("log_level", defaults.log_level)),
        log_file=data.get("log_file"),
        progress_interval=int(data.get("progress_interval", defaults.progress_interval)),
        extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
    )


def pool_config_from_env(base: PoolConfig | None = None) -> PoolConfig:
    """
    Overlay JOBPOOL_* environment variables on ``base`` (or the defaults).

    Call ``dotenv.load_dotenv()`` first to pick up a local .env file.
    """
    config = base or PoolConfig()
    overrides: Dict[str, Any] = {}

    max_at_once = os.getenv("JOBPOOL_MAX_AT_ONCE")
    if max_at_once:
        overrides["max_at_once"] = int(max_at_once)
    log_level = os.getenv("JOBPOOL_LOG_LEVEL")
    if log_level:
        overrides["log_level"] = log_level
    log_file = os.getenv("JOBPOOL_LOG_FILE")
    if log_file:
        overrides["log_file"] = log_file
    progress_interval = os.getenv("JOBPOOL_PROGRESS_INTERVAL")
    if progress_interval:
        overrides["progress_interval"] = int(progress_interval)

    return replace(config, **overrides)
