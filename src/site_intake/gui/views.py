"""Review and project list views for the GUI."""

from __future__ import annotations

from html import escape
from typing import Iterable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QLabel,
    QPlainTextEdit,
    QTableWidget,
    QTableWidgetItem,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from ..i18n import Translator
from ..models import Project
from ..reporting import summarize_answers
from ..wizard import IntakeWizard


class SummaryView(QWidget):
    """Read-only summary of the answers shown on the last step."""

    def __init__(self, translator: Translator, *, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._translator = translator
        layout = QVBoxLayout(self)
        self._browser = QTextBrowser(self)
        self._browser.setReadOnly(True)
        layout.addWidget(self._browser)

    def show_wizard(self, wizard: IntakeWizard) -> None:
        lines = []
        for section in summarize_answers(wizard.schema, wizard.answers, self._translator):
            lines.append(f"<h4>{section['number']}. {escape(section['title'])}</h4><ul>")
            for label, value in section["items"]:
                lines.append(f"<li><b>{escape(label)}:</b> {escape(value)}</li>")
            lines.append("</ul>")
        result = wizard.validate()
        for message in result.errors:
            lines.append(f"<p style='color:#b00'>{escape(message.text)}</p>")
        for message in result.warnings:
            lines.append(f"<p style='color:#960'>{escape(message.text)}</p>")
        self._browser.setHtml("\n".join(lines) or "<p>Nothing entered yet.</p>")


class ProjectListView(QWidget):
    """Projects stored for the current client."""

    def __init__(self, translator: Translator, *, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._translator = translator
        layout = QVBoxLayout(self)
        self._summary = QLabel("Loading projects…", self)
        layout.addWidget(self._summary)
        self._table = QTableWidget(self)
        self._table.setColumnCount(5)
        self._table.setHorizontalHeaderLabels(["Name", "Goal", "Status", "Progress", "Created"])
        self._table.horizontalHeader().setStretchLastSection(True)
        layout.addWidget(self._table, stretch=1)

    def show_projects(self, projects: Iterable[Project]) -> None:
        entries = list(projects)
        self._summary.setText(f"{len(entries)} project(s)")
        self._table.setRowCount(len(entries))
        for row, project in enumerate(entries):
            values = [
                project.name,
                self._translator.option(project.goal) if project.goal else "",
                self._translator(f"status.{project.status.value}"),
                f"{project.progress}%",
                project.created_at or "",
            ]
            for column, value in enumerate(values):
                item = QTableWidgetItem(value)
                item.setFlags(item.flags() & ~Qt.ItemIsEditable)
                self._table.setItem(row, column, item)
        self._table.resizeColumnsToContents()

    def show_error(self, message: str) -> None:
        self._summary.setText(message)


class ActivityLogView(QWidget):
    """Streaming view of log output."""

    def __init__(self, *, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        self._log = QPlainTextEdit(self)
        self._log.setReadOnly(True)
        self._log.setMaximumHeight(110)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._log)

    def append_message(self, message: str) -> None:
        self._log.appendPlainText(message)
        self._log.verticalScrollBar().setValue(self._log.verticalScrollBar().maximum())


__all__ = ["SummaryView", "ProjectListView", "ActivityLogView"]
