from __future__ import annotations

"""Development auth provider.

Signs in a fixed local user without any network provider; the signed-in flag
is remembered in the local key/value table so the next launch restores it.
A real provider only has to offer the same ``sign_in`` / ``sign_out`` /
``current_user`` calls and the ``user_changed`` signal.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .database_manager import DatabaseManager
from .repositories import get_value, set_value

LOGGED_IN_KEY = "dev_logged_in"
_log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class User:
    uid: str
    display_name: str | None = None
    email: str | None = None
    photo_url: str | None = None


DEV_USER = User(
    uid="dev-user-123",
    display_name="Development User",
    email="dev@example.com",
    photo_url=None,
)


class DevAuthProvider(QObject):
    user_changed = pyqtSignal(object)  # User | None

    def __init__(self, db: DatabaseManager, user: User = DEV_USER):
        super().__init__()
        self._db = db
        self._user = user
        self._current: Optional[User] = user if get_value(db, LOGGED_IN_KEY) == "true" else None

    def current_user(self) -> Optional[User]:
        return self._current

    def sign_in(self) -> User:
        set_value(self._db, LOGGED_IN_KEY, "true")
        if self._current is None:
            self._current = self._user
            _log.info("signed in", extra={"_json_uid": self._user.uid})
            self.user_changed.emit(self._current)
        return self._current

    def sign_out(self) -> None:
        set_value(self._db, LOGGED_IN_KEY, "false")
        if self._current is not None:
            _log.info("signed out", extra={"_json_uid": self._current.uid})
            self._current = None
            self.user_changed.emit(None)


__all__ = ["User", "DevAuthProvider", "DEV_USER", "LOGGED_IN_KEY"]
