from __future__ import annotations

"""Toast overlay that mirrors the NotificationEmitter slot."""

from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QLabel, QWidget

from .models import Notification
from .notifications import NotificationEmitter


class Toast(QLabel):  # pragma: no cover - UI utility
    def __init__(self, parent: QWidget, emitter: NotificationEmitter):
        super().__init__(parent)
        self.setStyleSheet(
            """
            background: rgba(40,40,40,0.85);
            color: #fff; padding: 6px 12px; border-radius: 6px;
            """
        )
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.hide()
        emitter.changed.connect(self._on_changed)
        self._on_changed(emitter.current)

    def _on_changed(self, note: Optional[Notification]) -> None:
        if note is None:
            self.hide()
            return
        self.setText(f"<b>{note.title}</b><br>{note.message}")
        self.adjustSize()
        w = self.parentWidget().width()
        self.move(int((w - self.width()) / 2), 30)
        self.raise_()
        self.show()


__all__ = ["Toast"]
