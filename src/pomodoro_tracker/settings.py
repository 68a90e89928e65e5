from __future__ import annotations

"""Timer settings: durations, long-break cadence and validation."""

from dataclasses import dataclass, replace
from typing import Any

from .models import LONG_BREAK, SHORT_BREAK, SessionType

WORK_MINUTES = "work_minutes"
SHORT_BREAK_MINUTES = "short_break_minutes"
LONG_BREAK_MINUTES = "long_break_minutes"
LONG_BREAK_INTERVAL = "long_break_interval"

SETTING_KEYS = (WORK_MINUTES, SHORT_BREAK_MINUTES, LONG_BREAK_MINUTES, LONG_BREAK_INTERVAL)

# Field name -> key used in persisted records
_RECORD_KEYS = {
    WORK_MINUTES: "workTime",
    SHORT_BREAK_MINUTES: "shortBreak",
    LONG_BREAK_MINUTES: "longBreak",
    LONG_BREAK_INTERVAL: "longBreakInterval",
}


class SettingsError(ValueError):
    pass


@dataclass(slots=True, frozen=True)
class Settings:
    work_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    long_break_interval: int = 4

    def with_value(self, key: str, value: Any) -> "Settings":
        """Return a copy with ``key`` set to ``value`` converted to int.

        Raises SettingsError for unknown keys, non-integer input or values < 1.
        """
        if key not in SETTING_KEYS:
            raise SettingsError(f"Unknown setting: {key}")
        return replace(self, **{key: parse_setting_value(value)})

    def to_record(self) -> dict[str, int]:
        return {_RECORD_KEYS[k]: getattr(self, k) for k in SETTING_KEYS}

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "Settings":
        defaults = cls()
        values = {}
        for key in SETTING_KEYS:
            raw = data.get(_RECORD_KEYS[key])
            if raw is None:
                values[key] = getattr(defaults, key)
                continue
            try:
                values[key] = parse_setting_value(raw)
            except SettingsError:
                values[key] = getattr(defaults, key)
        return cls(**values)


def parse_setting_value(value: Any) -> int:
    if isinstance(value, bool):
        raise SettingsError(f"Not an integer: {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise SettingsError(f"Not an integer: {value!r}")
        value = int(value)
    try:
        number = int(str(value).strip())
    except ValueError:
        raise SettingsError(f"Not an integer: {value!r}") from None
    if number < 1:
        raise SettingsError(f"Must be a positive integer: {number}")
    return number


def full_duration(session_type: SessionType, settings: Settings) -> int:
    """Full length in seconds of a session of ``session_type``."""
    if session_type == SHORT_BREAK:
        return settings.short_break_minutes * 60
    if session_type == LONG_BREAK:
        return settings.long_break_minutes * 60
    return settings.work_minutes * 60


__all__ = [
    "Settings",
    "SettingsError",
    "SETTING_KEYS",
    "WORK_MINUTES",
    "SHORT_BREAK_MINUTES",
    "LONG_BREAK_MINUTES",
    "LONG_BREAK_INTERVAL",
    "parse_setting_value",
    "full_duration",
]
