"""Bridge loguru messages into Qt signals."""

from __future__ import annotations

from loguru import logger
from PySide6.QtCore import QObject, Signal


class LogBridge(QObject):
    """Forward site_intake log records to the activity log."""

    message_emitted = Signal(str)

    def __init__(self, level: str = "INFO") -> None:
        super().__init__()
        self._sink_id = logger.add(
            self._sink,
            level=level,
            filter=lambda record: record["name"].startswith("site_intake"),
            format="{time:HH:mm:ss} {level: <8} {message}",
        )

    def _sink(self, message) -> None:  # pragma: no cover - integrates with loguru internals
        self.message_emitted.emit(str(message).rstrip("\n"))

    def close(self) -> None:
        logger.remove(self._sink_id)


__all__ = ["LogBridge"]
