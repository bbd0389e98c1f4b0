"""Background workers that talk to the project store without freezing the UI."""

from __future__ import annotations

import asyncio

from loguru import logger
from PySide6.QtCore import QObject, Signal

from ..notify import NoticeKind
from ..store import ProjectStore
from ..wizard import IntakeWizard, SubmitTicket


class NotificationBridge(QObject):
    """Notifier that hands notices to the GUI thread via a signal."""

    notified = Signal(str, str)

    def notify(self, kind: NoticeKind, message: str) -> None:
        self.notified.emit(kind.value, message)


class SubmitWorker(QObject):
    """Complete a reserved wizard submission on a worker thread."""

    finished = Signal(object)
    failed = Signal(str)

    def __init__(self, wizard: IntakeWizard, ticket: SubmitTicket) -> None:
        super().__init__()
        self._wizard = wizard
        self._ticket = ticket

    def run(self) -> None:
        try:
            project = asyncio.run(self._wizard.complete_submit(self._ticket))
        except Exception as exc:  # pragma: no cover - runtime error surface to GUI
            logger.exception("Submission crashed")
            self.failed.emit(f"Submission failed: {exc}")
        else:
            self.finished.emit(project)


class ListProjectsWorker(QObject):
    """Load the client's projects in the background."""

    finished = Signal(object)
    failed = Signal(str)

    def __init__(self, store: ProjectStore, client_id: str) -> None:
        super().__init__()
        self._store = store
        self._client_id = client_id

    def run(self) -> None:
        try:
            projects = asyncio.run(self._store.list_projects(self._client_id))
        except Exception as exc:  # pragma: no cover - runtime error surface to GUI
            logger.exception("Listing projects failed")
            self.failed.emit(f"Could not load projects: {exc}")
        else:
            self.finished.emit(projects)


__all__ = ["NotificationBridge", "SubmitWorker", "ListProjectsWorker"]
