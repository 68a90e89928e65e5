from __future__ import annotations

"""Application configuration resolved from environment variables.

Leaving ``POMODORO_REMOTE_URL`` unset runs in development mode: no remote
record store, everything lives in the local SQLite fallback.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .notifications import NOTIFICATION_TIMEOUT_MS
from .timer import TICK_INTERVAL_MS

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent.parent / "data"


@dataclass(slots=True)
class AppConfig:
    data_dir: Path = DEFAULT_DATA_DIR
    remote_url: Optional[str] = None
    remote_token: Optional[str] = None
    remote_timeout: float = 10.0
    remote_read_timeout: float = 3.0
    max_retries: int = 3
    backoff_base: float = 0.75
    log_level: int = logging.INFO
    notification_timeout_ms: int = NOTIFICATION_TIMEOUT_MS
    tick_interval_ms: int = TICK_INTERVAL_MS

    @property
    def db_path(self) -> Path:
        return self.data_dir / "pomodoro_tracker.sqlite"

    @property
    def dev_mode(self) -> bool:
        return not self.remote_url

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "AppConfig":
        env = os.environ if env is None else env
        cfg = cls()
        if env.get("POMODORO_DATA_DIR"):
            cfg.data_dir = Path(env["POMODORO_DATA_DIR"]).expanduser()
        cfg.remote_url = env.get("POMODORO_REMOTE_URL") or None
        cfg.remote_token = env.get("POMODORO_REMOTE_TOKEN") or None
        if env.get("POMODORO_REMOTE_TIMEOUT"):
            cfg.remote_timeout = float(env["POMODORO_REMOTE_TIMEOUT"])
        level_name = (env.get("POMODORO_LOG_LEVEL") or "").upper()
        if level_name:
            level = logging.getLevelName(level_name)
            if isinstance(level, int):
                cfg.log_level = level
        return cfg


__all__ = ["AppConfig"]
