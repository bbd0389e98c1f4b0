"""User-facing notifications raised by the wizard."""

from __future__ import annotations

from enum import Enum
from typing import List, Protocol, Tuple

from loguru import logger
from rich.console import Console


class NoticeKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Notifier(Protocol):
    """Fire-and-forget feedback channel."""

    def notify(self, kind: NoticeKind, message: str) -> None:
        ...


class LogNotifier:
    """Route notifications into the application log."""

    def notify(self, kind: NoticeKind, message: str) -> None:
        if kind == NoticeKind.ERROR:
            logger.error(message)
        else:
            logger.success(message)


class ConsoleNotifier:
    """Print notifications to a rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def notify(self, kind: NoticeKind, message: str) -> None:
        style = "red" if kind == NoticeKind.ERROR else "green"
        self._console.print(f"[{style}]{message}[/{style}]")


class RecordingNotifier:
    """Keep notifications in memory; used by headless hosts and tests."""

    def __init__(self) -> None:
        self.notices: List[Tuple[NoticeKind, str]] = []

    def notify(self, kind: NoticeKind, message: str) -> None:
        self.notices.append((kind, message))


__all__ = ["NoticeKind", "Notifier", "LogNotifier", "ConsoleNotifier", "RecordingNotifier"]
