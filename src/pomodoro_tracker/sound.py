from __future__ import annotations

"""One-shot completion signal."""

from PyQt6.QtWidgets import QApplication


def play_completion_sound() -> None:  # pragma: no cover - platform audio
    app = QApplication.instance()
    if not isinstance(app, QApplication):
        raise RuntimeError("no QApplication available for audio output")
    QApplication.beep()


__all__ = ["play_completion_sound"]
