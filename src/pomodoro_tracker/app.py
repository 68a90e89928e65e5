from __future__ import annotations

import argparse
import sys
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QSpinBox,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from .auth import DevAuthProvider, User
from .config import AppConfig
from .database_manager import DBConfig, DatabaseManager
from .keys import load_token, redact, save_token
from .logging_setup import bind_user, configure_logging
from .models import WORK, SessionState
from .scheduler import QtScheduler
from .session import SessionContext
from .settings import (
    LONG_BREAK_INTERVAL,
    LONG_BREAK_MINUTES,
    SHORT_BREAK_MINUTES,
    WORK_MINUTES,
    Settings,
)
from .sound import play_completion_sound
from .statistics_dialog import StatisticsDialog
from .stores import LayeredStore, LocalRecordStore, RemoteRecordStore, RemoteStoreConfig
from .task_list_widget import TaskListWidget
from .timer import focus_hours, format_time, session_label
from .toast import Toast

APP_NAME = "Pomodoro Tracker"

# (label, key, max) for the settings row; minimum is always 1
SETTING_FIELDS = [
    ("Work (min)", WORK_MINUTES, 60),
    ("Short Break (min)", SHORT_BREAK_MINUTES, 30),
    ("Long Break (min)", LONG_BREAK_MINUTES, 60),
    ("Long Break Every", LONG_BREAK_INTERVAL, 12),
]


@dataclass(slots=True)
class AppState:
    config: AppConfig
    db: DatabaseManager
    auth: DevAuthProvider
    store: LayeredStore
    scheduler: QtScheduler


def build_store(config: AppConfig, db: DatabaseManager) -> LayeredStore:
    local = LocalRecordStore(db)
    if config.dev_mode:
        return LayeredStore(None, local)
    token = load_token(config.data_dir) or config.remote_token
    remote = RemoteRecordStore(
        RemoteStoreConfig(
            base_url=config.remote_url,  # type: ignore[arg-type]
            token=token,
            timeout=config.remote_timeout,
            read_timeout=config.remote_read_timeout,
            max_retries=config.max_retries,
            backoff_base=config.backoff_base,
        )
    )
    logging.getLogger(__name__).info(
        "remote store configured", extra={"_json_url": config.remote_url, "_json_token": redact(token)}
    )
    return LayeredStore(remote, local, ThreadPoolExecutor(max_workers=1, thread_name_prefix="record-sync"))


def get_app_state(config: AppConfig | None = None) -> AppState:
    config = config or AppConfig.from_env()
    config.data_dir.mkdir(parents=True, exist_ok=True)
    # Logging first
    configure_logging(config.data_dir, config.log_level)
    db = DatabaseManager(DBConfig(path=config.db_path))
    db.init_db()
    auth = DevAuthProvider(db)
    return AppState(
        config=config,
        db=db,
        auth=auth,
        store=build_store(config, db),
        scheduler=QtScheduler(),
    )


class SignedOutPage(QWidget):  # pragma: no cover - simple UI
    def __init__(self, auth: DevAuthProvider) -> None:
        super().__init__()
        layout = QVBoxLayout(self)
        label = QLabel(f"{APP_NAME}\nSign in to sync your sessions and tasks")
        label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        btn = QPushButton("Sign in")
        btn.clicked.connect(auth.sign_in)
        layout.addStretch(1)
        layout.addWidget(label)
        layout.addWidget(btn, 0, Qt.AlignmentFlag.AlignCenter)
        layout.addStretch(1)


class TimerPage(QWidget):  # pragma: no cover UI heavy
    def __init__(self, ctx: SessionContext, auth: DevAuthProvider) -> None:
        super().__init__()
        self._ctx = ctx

        user = ctx.user
        profile_row = QHBoxLayout()
        name = (user.display_name or user.email or user.uid) if user else ""
        profile_row.addWidget(QLabel(name))
        profile_row.addStretch(1)
        btn_sign_out = QPushButton("Sign out")
        btn_sign_out.clicked.connect(auth.sign_out)
        profile_row.addWidget(btn_sign_out)

        self.session_label = QLabel()
        self.session_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.active_task_label = QLabel()
        self.active_task_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.time_label = QLabel("25:00")
        self.time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        font = self.time_label.font()
        font.setPointSize(36)
        self.time_label.setFont(font)
        self.progress = QProgressBar()
        self.progress.setRange(0, 1000)
        self.progress.setTextVisible(False)

        self.btn_toggle = QPushButton("Start")
        self.btn_reset = QPushButton("Reset")
        btn_row = QHBoxLayout()
        btn_row.addStretch(1)
        btn_row.addWidget(self.btn_toggle)
        btn_row.addWidget(self.btn_reset)
        btn_row.addStretch(1)

        self.stats_label = QLabel()
        self.stats_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.btn_stats = QPushButton("View Statistics")

        settings_row = QHBoxLayout()
        self._spins: dict[str, QSpinBox] = {}
        for label, key, maximum in SETTING_FIELDS:
            spin = QSpinBox()
            spin.setRange(1, maximum)
            spin.valueChanged.connect(lambda v, k=key: self._ctx.update_setting(k, v))
            self._spins[key] = spin
            settings_row.addWidget(QLabel(label))
            settings_row.addWidget(spin)
        settings_row.addStretch(1)

        layout = QVBoxLayout(self)
        layout.addLayout(profile_row)
        layout.addWidget(self.session_label)
        layout.addWidget(self.active_task_label)
        layout.addWidget(self.time_label)
        layout.addWidget(self.progress)
        layout.addLayout(btn_row)
        layout.addWidget(self.stats_label)
        layout.addWidget(self.btn_stats, 0, Qt.AlignmentFlag.AlignCenter)
        layout.addLayout(settings_row)
        layout.addWidget(TaskListWidget(ctx.tasks), 1)

        self.btn_toggle.clicked.connect(ctx.toggle)
        self.btn_reset.clicked.connect(ctx.reset)
        self.btn_stats.clicked.connect(self._open_statistics)
        ctx.timer.state_changed.connect(self._render)
        ctx.timer.settings_changed.connect(self._load_settings)
        ctx.tasks.changed.connect(lambda: self._render(ctx.state()))
        self._load_settings(ctx.settings)
        self._render(ctx.state())

    def _load_settings(self, settings: Settings) -> None:
        for key, spin in self._spins.items():
            value = getattr(settings, key)
            if spin.value() != value:
                spin.blockSignals(True)
                spin.setValue(value)
                spin.blockSignals(False)

    def _render(self, state: SessionState) -> None:
        self.session_label.setText(session_label(state.session_type))
        active = self._ctx.tasks.active_task()
        if active and state.session_type == WORK:
            self.active_task_label.setText(f"Working on: {active.title}")
        else:
            self.active_task_label.setText("")
        self.time_label.setText(format_time(state.time_remaining))
        self.progress.setValue(int(self._ctx.timer.progress() * 1000))
        self.btn_toggle.setText("Pause" if state.is_running else "Start")
        hours = focus_hours(state.completed_work_sessions_total, self._ctx.settings.work_minutes)
        self.stats_label.setText(
            f"Today: {state.completed_work_sessions_today}   "
            f"Total: {state.completed_work_sessions_total}   Hours: {hours}"
        )

    def _open_statistics(self) -> None:
        StatisticsDialog(self._ctx.ledger, self).exec()


class MainWindow(QMainWindow):  # pragma: no cover UI
    def __init__(self, state: AppState) -> None:  # noqa: D401
        super().__init__()
        self.state = state
        self.setWindowTitle(APP_NAME)
        self.resize(520, 760)
        self._ctx: Optional[SessionContext] = None

        self.pages = QStackedWidget()
        self.pages.addWidget(SignedOutPage(state.auth))
        self.setCentralWidget(self.pages)
        self.toast: Optional[Toast] = None

        state.auth.user_changed.connect(self._on_user_changed)
        self._on_user_changed(state.auth.current_user())

    def _on_user_changed(self, user: Optional[User]) -> None:
        self._close_session()
        bind_user(user.uid if user else None)
        if user is None:
            self.pages.setCurrentIndex(0)
            return
        ctx = SessionContext(
            user,
            self.state.store,
            self.state.scheduler,
            completion_signal=play_completion_sound,
            notification_timeout_ms=self.state.config.notification_timeout_ms,
            tick_interval_ms=self.state.config.tick_interval_ms,
        )
        ctx.open()
        self._ctx = ctx
        page = TimerPage(ctx, self.state.auth)
        self.pages.addWidget(page)
        self.pages.setCurrentWidget(page)
        self.toast = Toast(self, ctx.notifications)

    def _close_session(self) -> None:
        if self._ctx is None:
            return
        self._ctx.close()
        self._ctx = None
        while self.pages.count() > 1:
            w = self.pages.widget(1)
            self.pages.removeWidget(w)
            w.deleteLater()
        if self.toast is not None:
            self.toast.deleteLater()
            self.toast = None

    def closeEvent(self, event) -> None:  # noqa: N802
        self._close_session()
        self.state.store.shutdown(wait=True)
        self.state.db.close()
        super().closeEvent(event)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pomodoro-tracker", description=APP_NAME)
    parser.add_argument(
        "--set-token",
        metavar="TOKEN",
        help="store the record store token in the OS keyring and exit ('-' reads it from stdin)",
    )
    return parser


def set_token(config: AppConfig, raw: str) -> int:
    token = (sys.stdin.readline() if raw == "-" else raw).strip()
    if not token:
        print("error: empty token", file=sys.stderr)
        return 2
    config.data_dir.mkdir(parents=True, exist_ok=True)
    save_token(config.data_dir, token)
    print(f"Record store token saved ({redact(token)})")
    return 0


def run(argv: Optional[list[str]] = None) -> int:
    if argv is None:
        argv = sys.argv
    # Unknown options are left for Qt (e.g. -platform)
    args, qt_args = build_parser().parse_known_args(argv[1:])
    if args.set_token is not None:
        return set_token(AppConfig.from_env(), args.set_token)
    app = QApplication(argv[:1] + qt_args)
    state = get_app_state()
    window = MainWindow(state)
    window.show()
    return app.exec()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(run())
