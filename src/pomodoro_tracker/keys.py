from __future__ import annotations

"""Record store token storage & retrieval.

Strategy:
 - Try OS keyring via 'keyring' package.
 - Fallback to simple XOR-obfuscated file (NOT strong encryption, but avoids plain text) when no keyring backend works.
 - Redaction helper for logs.
"""

import base64
import logging
from pathlib import Path
from typing import Optional

import keyring
from keyring.errors import KeyringError

SERVICE_NAME = "pomodoro_tracker_remote"
FALLBACK_FILENAME = "remote.token"
_XOR_KEY = b"pomodoro-tracker-xor"
_log = logging.getLogger(__name__)


def save_token(base_dir: Path, token: str) -> None:
    try:
        keyring.set_password(SERVICE_NAME, "default", token)
        _log.info("token stored in keyring")
        return
    except KeyringError:
        _log.warning("keyring storage failed; falling back to file")
    path = base_dir / FALLBACK_FILENAME
    path.write_bytes(_xor_obfuscate(token.encode("utf-8")))
    _log.info("token stored in fallback file", extra={"_json_location": "fallback"})


def load_token(base_dir: Path) -> Optional[str]:
    try:
        v = keyring.get_password(SERVICE_NAME, "default")
        if v:
            return v
    except KeyringError as e:
        _log.debug("keyring unavailable: %s", e)
    path = base_dir / FALLBACK_FILENAME
    if path.exists():
        try:
            return _xor_deobfuscate(path.read_bytes()).decode("utf-8")
        except (ValueError, UnicodeDecodeError):
            _log.warning("unreadable token file %s", path)
            return None
    return None


def redact(value: str | None) -> str:
    if not value:
        return "<none>"
    if len(value) <= 6:
        return "***"
    return value[:3] + "***" + value[-3:]


def _xor_obfuscate(data: bytes) -> bytes:
    return base64.b64encode(bytes([b ^ _XOR_KEY[i % len(_XOR_KEY)] for i, b in enumerate(data)]))


def _xor_deobfuscate(data: bytes) -> bytes:
    raw = base64.b64decode(data)
    return bytes([b ^ _XOR_KEY[i % len(_XOR_KEY)] for i, b in enumerate(raw)])


__all__ = ["save_token", "load_token", "redact"]
