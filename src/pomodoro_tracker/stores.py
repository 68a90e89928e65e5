from __future__ import annotations

"""Record stores: remote document store, local SQLite fallback and the layered policy.

A user's data is one logical record with sub-fields ``settings``, ``tasks`` +
``activeTaskId``, ``stats`` and ``dailyStats``. Every store speaks the same
two calls:

 - ``read(uid) -> dict | None``
 - ``write(uid, partial)`` with merge-on-write (fields not in ``partial`` are
   left untouched).

``LayeredStore`` reads the primary and falls back per record kind on miss or
error; writes go synchronously to the local fallback and fire-and-forget to the
primary through an executor. Failures are logged, never raised to the caller.
"""

from concurrent.futures import Executor
from dataclasses import dataclass
import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Protocol

import httpx

from .database_manager import DatabaseManager
from .models import utc_now_iso
from .repositories import get_value, set_value

logger = logging.getLogger(__name__)

# Record kind -> fields of the user record it owns
RECORD_KINDS: Dict[str, tuple[str, ...]] = {
    "settings": ("settings",),
    "tasks": ("tasks", "activeTaskId"),
    "stats": ("stats",),
    "dailyStats": ("dailyStats",),
}

# Global keys used when no user is signed in (and as the last read fallback)
LEGACY_KEYS = {
    "settings": "pomodoroSettings",
    "tasks": "pomodoroTasks",
    "stats": "pomodoroStats",
    "dailyStats": "pomodoroDailyStats",
}


class RecordStoreError(Exception):
    pass


class RecordStore(Protocol):
    def read(self, uid: str | None) -> Optional[dict]: ...

    def write(self, uid: str | None, partial: dict) -> None: ...


def _kinds_in(record: dict) -> list[str]:
    return [kind for kind, fields in RECORD_KINDS.items() if any(f in record for f in fields)]


# --- Remote -----------------------------------------------------------------

@dataclass(slots=True)
class RemoteStoreConfig:
    base_url: str
    token: str | None = None
    timeout: float = 10.0
    max_retries: int = 3
    backoff_base: float = 0.75
    # Reads run on the GUI thread while a session opens
    read_timeout: float = 3.0
    read_retries: int = 0


class RemoteRecordStore:
    """REST document store: ``GET``/``PATCH {base_url}/users/{uid}``.

    The server merges PATCH bodies into the stored document. 429, 5xx and
    transport failures are retried with exponential backoff; other 4xx fail
    immediately. Writes run off the GUI thread and use the full retry
    budget; a failed read falls straight through to the local store.
    """

    def __init__(self, config: RemoteStoreConfig, transport: httpx.BaseTransport | None = None):
        self._config = config
        headers = {"Accept": "application/json"}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        self._client = httpx.Client(
            base_url=config.base_url.rstrip("/"),
            timeout=config.timeout,
            transport=transport,
            headers=headers,
        )

    def close(self):  # pragma: no cover simple
        self._client.close()

    def read(self, uid: str | None) -> Optional[dict]:
        if not uid:
            return None
        resp = self._request(
            "GET",
            f"/users/{uid}",
            retries=self._config.read_retries,
            timeout=self._config.read_timeout,
        )
        if resp.status_code == 404:
            return None
        try:
            data = resp.json()
        except ValueError as e:
            raise RecordStoreError(f"Invalid JSON from record store: {e}") from e
        if data is None:
            return None
        if not isinstance(data, dict):
            raise RecordStoreError("Record store returned a non-object document")
        return data

    def write(self, uid: str | None, partial: dict) -> None:
        if not uid:
            raise RecordStoreError("Remote writes require a signed-in user")
        body = dict(partial)
        body["lastUpdated"] = utc_now_iso()
        self._request("PATCH", f"/users/{uid}", json=body)

    def _request(self, method: str, path: str, retries: int | None = None, **kwargs) -> httpx.Response:
        if retries is None:
            retries = self._config.max_retries
        attempt = 0
        while True:
            try:
                resp = self._client.request(method, path, **kwargs)
            except httpx.TransportError as e:
                error = RecordStoreError(f"{type(e).__name__}: {e}")
            else:
                if resp.status_code == 429 or resp.status_code >= 500:
                    error = RecordStoreError(f"HTTP {resp.status_code}: {resp.text[:200]}")
                elif resp.status_code >= 400 and resp.status_code != 404:
                    raise RecordStoreError(f"HTTP {resp.status_code}: {resp.text[:200]}")
                else:
                    return resp
            attempt += 1
            if attempt > retries:
                raise error
            sleep_for = self._config.backoff_base * (2 ** (attempt - 1))
            logger.debug("record store retry %s in %.2fs: %s", attempt, sleep_for, error)
            time.sleep(sleep_for)


# --- Local ------------------------------------------------------------------

class LocalRecordStore:
    """Key/value fallback in the local SQLite ``kv_store`` table.

    Each record kind is stored as JSON under ``<kind>_<uid>``, or under its
    legacy global key when there is no user.
    """

    def __init__(self, db: DatabaseManager):
        self._db = db

    @staticmethod
    def key_for(kind: str, uid: str | None) -> str:
        return f"{kind}_{uid}" if uid else LEGACY_KEYS[kind]

    def read(self, uid: str | None) -> Optional[dict]:
        record: dict = {}
        for kind in RECORD_KINDS:
            value = self._read_kind(kind, uid)
            if value is None and uid:
                value = self._read_kind(kind, None)
            if value is not None:
                record.update(value)
        return record or None

    def write(self, uid: str | None, partial: dict) -> None:
        for kind in _kinds_in(partial):
            fields = RECORD_KINDS[kind]
            value = self._read_kind(kind, uid) if len(fields) > 1 else None
            merged = dict(value or {})
            merged.update({f: partial[f] for f in fields if f in partial})
            payload: Any = merged if len(fields) > 1 else merged[fields[0]]
            set_value(self._db, self.key_for(kind, uid), json.dumps(payload))

    def _read_kind(self, kind: str, uid: str | None) -> Optional[dict]:
        raw = get_value(self._db, self.key_for(kind, uid))
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("discarding unreadable local record", extra={"_json_kind": kind})
            return None
        fields = RECORD_KINDS[kind]
        if len(fields) > 1:
            return data if isinstance(data, dict) else None
        return {fields[0]: data}


# --- Layered policy ---------------------------------------------------------

class LayeredStore:
    def __init__(
        self,
        primary: RecordStore | None,
        fallback: RecordStore,
        executor: Executor | None = None,
    ):
        self._primary = primary
        self._fallback = fallback
        self._executor = executor

    @property
    def has_primary(self) -> bool:
        return self._primary is not None

    def read(self, uid: str | None) -> Optional[dict]:
        primary_rec: dict = {}
        if self._primary is not None and uid:
            try:
                primary_rec = self._primary.read(uid) or {}
            except Exception as e:
                logger.warning("primary store read failed; using local fallback: %s", e)
        try:
            fallback_rec = self._fallback.read(uid) or {}
        except Exception as e:
            logger.warning("local store read failed: %s", e)
            fallback_rec = {}

        merged: dict = {}
        for kind, fields in RECORD_KINDS.items():
            source = primary_rec if kind in _kinds_in(primary_rec) else fallback_rec
            merged.update({f: source[f] for f in fields if f in source})
        return merged or None

    def write(self, uid: str | None, partial: dict) -> None:
        try:
            self._fallback.write(uid, partial)
        except Exception as e:
            logger.warning("local store write failed: %s", e)
        if self._primary is None or not uid:
            return
        job = self._guarded(self._primary.write, uid, partial)
        if self._executor is None:
            job()
        else:
            self._executor.submit(job)

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)

    @staticmethod
    def _guarded(fn: Callable[[str, dict], None], uid: str, partial: dict) -> Callable[[], None]:
        def job() -> None:
            try:
                fn(uid, partial)
            except Exception as e:
                logger.warning(
                    "primary store write failed: %s", e, extra={"_json_fields": sorted(partial)}
                )

        return job


__all__ = [
    "RecordStore",
    "RecordStoreError",
    "RemoteStoreConfig",
    "RemoteRecordStore",
    "LocalRecordStore",
    "LayeredStore",
    "RECORD_KINDS",
    "LEGACY_KEYS",
]
