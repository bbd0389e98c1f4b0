"""Main window and step navigation for the intake GUI."""

from __future__ import annotations

from typing import Any, List

from loguru import logger
from PySide6.QtCore import Qt, QThread
from PySide6.QtWidgets import (
    QHBoxLayout,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from ..answers import InvalidFieldPath, InvalidFieldValue
from ..config import Config
from ..i18n import Translator
from ..notify import NoticeKind
from ..store import ProjectStore
from ..wizard import IntakeWizard, StepOutOfRange, WizardClosed
from .forms import StepPage
from .logging_bridge import LogBridge
from .views import ActivityLogView, ProjectListView, SummaryView
from .workers import ListProjectsWorker, NotificationBridge, SubmitWorker


class MainWindow(QMainWindow):
    """Wizard shell: step sidebar, stacked step pages and action buttons."""

    def __init__(self, config: Config, store: ProjectStore, *, client_id: str, translator: Translator) -> None:
        super().__init__()
        self._translator = translator
        self._store = store
        self._client_id = client_id
        self._threads: List[QThread] = []
        self._closing = False
        self._notifications = NotificationBridge()
        self._notifications.notified.connect(self._show_notice)
        self._wizard = IntakeWizard.from_config(
            config,
            store,
            client_id=client_id,
            notifier=self._notifications,
            translator=translator,
            on_cancel=self._on_cancelled,
        )

        self.setWindowTitle(translator("wizard.title"))
        self.resize(980, 720)
        if translator.is_rtl:
            self.setLayoutDirection(Qt.RightToLeft)

        container = QWidget(self)
        layout = QVBoxLayout(container)
        body = QWidget(container)
        body_layout = QHBoxLayout(body)
        body_layout.setContentsMargins(0, 0, 0, 0)

        self._nav = QListWidget(body)
        self._nav.setMaximumWidth(240)
        self._stack = QStackedWidget(body)
        self._pages: List[StepPage] = []
        for step in self._wizard.schema.steps:
            self._nav.addItem(QListWidgetItem(f"{step.number}. {translator(step.title)}"))
            page = StepPage(step, translator, parent=self._stack)
            page.edited.connect(self._on_edited)
            page.toggled.connect(self._on_toggled)
            self._pages.append(page)
            if step.number == self._wizard.total_steps:
                holder = QWidget(self._stack)
                holder_layout = QVBoxLayout(holder)
                holder_layout.setContentsMargins(0, 0, 0, 0)
                holder_layout.addWidget(page)
                self._summary = SummaryView(translator, parent=holder)
                holder_layout.addWidget(self._summary, stretch=1)
                self._stack.addWidget(holder)
            else:
                self._stack.addWidget(page)
        self._nav.addItem(QListWidgetItem("Projects"))
        self._projects_view = ProjectListView(translator, parent=self._stack)
        self._stack.addWidget(self._projects_view)

        body_layout.addWidget(self._nav)
        body_layout.addWidget(self._stack, stretch=1)
        layout.addWidget(body, stretch=1)

        buttons = QHBoxLayout()
        self._back_button = QPushButton(translator("wizard.back"), container)
        self._next_button = QPushButton(translator("wizard.next"), container)
        self._submit_button = QPushButton(translator("wizard.submit"), container)
        self._cancel_button = QPushButton(translator("wizard.cancel"), container)
        buttons.addWidget(self._cancel_button)
        buttons.addStretch(1)
        buttons.addWidget(self._back_button)
        buttons.addWidget(self._next_button)
        buttons.addWidget(self._submit_button)
        layout.addLayout(buttons)

        self._activity = ActivityLogView(parent=container)
        layout.addWidget(self._activity)
        self._log_bridge = LogBridge()
        self._log_bridge.message_emitted.connect(self._activity.append_message)

        self.setCentralWidget(container)

        self._nav.currentRowChanged.connect(self._on_nav)
        self._back_button.clicked.connect(self._go_back)
        self._next_button.clicked.connect(self._go_next)
        self._submit_button.clicked.connect(self._start_submit)
        self._cancel_button.clicked.connect(self._confirm_cancel)

        self._show_current_step()

    # ------------------------------------------------------------------
    # Worker orchestration helpers
    # ------------------------------------------------------------------
    def _launch_worker(self, worker, *, on_finished=None, on_failed=None) -> None:
        thread = QThread(self)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)

        def _cleanup() -> None:
            thread.quit()
            thread.wait()
            worker.deleteLater()

        def _done(*args) -> None:
            _cleanup()
            if on_finished:
                on_finished(*args)

        def _fail(*args) -> None:
            _cleanup()
            if on_failed:
                on_failed(*args)

        worker.finished.connect(_done)
        worker.failed.connect(_fail)
        thread.finished.connect(thread.deleteLater)
        self._threads.append(thread)
        thread.finished.connect(lambda: self._threads.remove(thread))
        thread.start()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def _show_current_step(self) -> None:
        step = self._wizard.current_step
        page = self._pages[step - 1]
        page.sync(self._wizard)
        if step == self._wizard.total_steps:
            self._summary.show_wizard(self._wizard)
        self._stack.setCurrentIndex(step - 1)
        self._nav.blockSignals(True)
        self._nav.setCurrentRow(step - 1)
        self._nav.blockSignals(False)
        self._refresh_buttons()

    def _refresh_buttons(self) -> None:
        wizard = self._wizard
        open_ = not wizard.closed and not wizard.is_submitting
        self._back_button.setEnabled(open_ and wizard.current_step > 1)
        self._next_button.setEnabled(open_ and not wizard.is_last_step)
        self._submit_button.setEnabled(wizard.can_submit)
        self._cancel_button.setEnabled(not wizard.closed)
        for page in self._pages:
            page.setEnabled(open_)

    def _on_nav(self, row: int) -> None:
        if row == self._wizard.total_steps:
            self._stack.setCurrentWidget(self._projects_view)
            self._load_projects()
            return
        if self._wizard.closed or self._wizard.is_submitting:
            self._show_current_step()
            return
        try:
            self._wizard.go_to(row + 1)
        except StepOutOfRange as exc:
            self.statusBar().showMessage(str(exc), 4000)
        self._show_current_step()

    def _go_back(self) -> None:
        self._wizard.previous_step()
        self._show_current_step()

    def _go_next(self) -> None:
        self._wizard.next_step()
        self._show_current_step()

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def _apply(self, edit, path: str, value: Any) -> None:
        try:
            edit(path, value)
        except (InvalidFieldPath, InvalidFieldValue, WizardClosed) as exc:
            logger.warning("Rejected edit: {}", exc)
            self.statusBar().showMessage(str(exc), 4000)
        if path == self._wizard.schema.type_path:
            for page in self._pages:
                if page.step.is_conditional:
                    page.sync(self._wizard)
        if self._wizard.is_last_step:
            self._summary.show_wizard(self._wizard)
        self._refresh_buttons()

    def _on_edited(self, path: str, value: Any) -> None:
        self._apply(self._wizard.set_field, path, value)

    def _on_toggled(self, path: str, item: str) -> None:
        self._apply(self._wizard.toggle, path, item)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _start_submit(self) -> None:
        ticket = self._wizard.reserve_submit()
        if ticket is None:
            return
        self._refresh_buttons()
        self.statusBar().showMessage(self._translator("wizard.submitting"))

        def _done(project) -> None:
            self.statusBar().clearMessage()
            self._refresh_buttons()
            if project is not None:
                self._nav.setCurrentRow(self._wizard.total_steps)

        def _fail(message: str) -> None:
            self.statusBar().clearMessage()
            self._refresh_buttons()
            QMessageBox.critical(self, self._translator("wizard.error"), message)

        self._launch_worker(SubmitWorker(self._wizard, ticket), on_finished=_done, on_failed=_fail)

    def _load_projects(self) -> None:
        worker = ListProjectsWorker(self._store, self._client_id)
        self._launch_worker(
            worker,
            on_finished=self._projects_view.show_projects,
            on_failed=self._projects_view.show_error,
        )

    def _confirm_cancel(self) -> None:
        answer = QMessageBox.question(self, self._translator("wizard.cancel"), "Discard this project request?")
        if answer == QMessageBox.Yes:
            self._wizard.cancel()

    def _show_notice(self, kind: str, message: str) -> None:
        if kind == NoticeKind.ERROR.value:
            QMessageBox.warning(self, self._translator("wizard.error"), message)
        else:
            self.statusBar().showMessage(message, 6000)

    def _on_cancelled(self) -> None:
        if not self._closing:
            self.close()

    def closeEvent(self, event) -> None:  # pragma: no cover - UI only
        self._closing = True
        if not self._wizard.closed:
            self._wizard.cancel()
        self._log_bridge.close()
        super().closeEvent(event)


__all__ = ["MainWindow"]
