from __future__ import annotations

"""Task list panel: add, activate, complete and delete tasks."""

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from .models import Task
from .task_store import TaskStore


def task_caption(task: Task, active_id: str | None) -> str:
    marker = "✓ " if task.completed else ("▶ " if task.id == active_id else "")
    return f"{marker}{task.title}  🍅 {task.pomodoro_count}"


class TaskListWidget(QWidget):  # pragma: no cover UI heavy
    def __init__(self, store: TaskStore):
        super().__init__()
        self._store = store

        self.title_edit = QLineEdit()
        self.title_edit.setPlaceholderText("Enter task name...")
        self.btn_add = QPushButton("Add")
        add_row = QHBoxLayout()
        add_row.addWidget(self.title_edit, 1)
        add_row.addWidget(self.btn_add)

        self.list = QListWidget()
        self.btn_activate = QPushButton("Set Active")
        self.btn_complete = QPushButton("Complete")
        self.btn_delete = QPushButton("Delete")
        btn_row = QHBoxLayout()
        for b in (self.btn_activate, self.btn_complete, self.btn_delete):
            btn_row.addWidget(b)
        btn_row.addStretch(1)

        self.active_label = QLabel("")

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Tasks"))
        layout.addLayout(add_row)
        layout.addWidget(self.list, 1)
        layout.addLayout(btn_row)
        layout.addWidget(self.active_label)

        self.btn_add.clicked.connect(self._on_add)
        self.title_edit.returnPressed.connect(self._on_add)
        self.btn_activate.clicked.connect(self._on_activate)
        self.btn_complete.clicked.connect(self._on_complete)
        self.btn_delete.clicked.connect(self._on_delete)
        self.list.itemDoubleClicked.connect(lambda _item: self._on_activate())
        self.list.currentItemChanged.connect(lambda *_: self._update_buttons())
        self._store.changed.connect(self.refresh)
        self.refresh()

    def refresh(self) -> None:
        current = self._selected_id()
        active_id = self._store.active_task_id
        self.list.clear()
        if not self._store.tasks():
            self.list.addItem(QListWidgetItem("No tasks yet. Add one to get started!"))
            self.list.item(0).setFlags(Qt.ItemFlag.NoItemFlags)
        for t in self._store.tasks():
            item = QListWidgetItem(task_caption(t, active_id))
            item.setData(Qt.ItemDataRole.UserRole, t.id)
            self.list.addItem(item)
            if t.id == current:
                self.list.setCurrentItem(item)
        active = self._store.active_task()
        self.active_label.setText(f"Active: {active.title}" if active else "")
        self._update_buttons()

    def _selected_id(self) -> str | None:
        item = self.list.currentItem()
        return item.data(Qt.ItemDataRole.UserRole) if item else None

    def _update_buttons(self) -> None:
        task = self._store.get(self._selected_id())
        open_task = task is not None and not task.completed
        self.btn_activate.setEnabled(open_task)
        self.btn_complete.setEnabled(open_task)
        self.btn_delete.setEnabled(task is not None)

    def _on_add(self) -> None:
        if self._store.add(self.title_edit.text()):
            self.title_edit.clear()

    def _on_activate(self) -> None:
        task_id = self._selected_id()
        if task_id:
            self._store.set_active(task_id)

    def _on_complete(self) -> None:
        task_id = self._selected_id()
        if task_id:
            self._store.complete(task_id)

    def _on_delete(self) -> None:
        task_id = self._selected_id()
        if task_id:
            self._store.delete(task_id)


__all__ = ["TaskListWidget", "task_caption"]
