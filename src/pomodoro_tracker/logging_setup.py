from __future__ import annotations

"""Logging setup: rotating JSON log file plus a terse console stream.

Every record written to the file carries the uid of the signed-in user (set
through ``bind_user`` whenever a session opens or closes) and the thread it
was emitted from, so remote writes finishing on the sync worker can be told
apart from GUI-thread activity.
"""

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, Optional

LOG_DIR_NAME = "logs"
LOG_FILE_BASENAME = "pomodoro_tracker.log"
_MAX_BYTES = 512_000
_BACKUPS = 5


class UserContextFilter(logging.Filter):
    def __init__(self) -> None:
        super().__init__()
        self.uid: Optional[str] = None

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "_json_uid"):
            record._json_uid = self.uid
        return True


_user_filter = UserContextFilter()


def bind_user(uid: Optional[str]) -> None:
    """Stamp subsequent log records with ``uid`` (None when signed out)."""
    _user_filter.uid = uid


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "ts": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for k, v in record.__dict__.items():
            if k.startswith("_json_") and v is not None:
                payload[k[6:]] = v
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(base_dir: Path, level: int = logging.INFO, console: bool = True) -> Path:
    log_dir = base_dir / LOG_DIR_NAME
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / LOG_FILE_BASENAME
    root = logging.getLogger()
    root.setLevel(level)
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    handler = RotatingFileHandler(logfile, maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8")
    handler.setFormatter(JsonFormatter())
    handler.addFilter(_user_filter)
    root.addHandler(handler)
    if console:
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(ch)
    logging.getLogger(__name__).info("logging initialised", extra={"_json_phase": "startup"})
    return logfile


__all__ = ["configure_logging", "bind_user", "JsonFormatter", "UserContextFilter"]
