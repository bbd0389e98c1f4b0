"""Application bootstrap for the Site Intake GUI."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger
from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication, QMessageBox, QStyle

from ..config import ConfigError, default_config, load_config
from ..i18n import translator_for
from ..store import build_store
from .main_window import MainWindow


def _init_logging() -> None:
    """Configure loguru to play nicely with the GUI."""

    # Remove default stderr handler so log messages flow through custom sinks.
    logger.remove()
    log_dir = Path.home() / ".site_intake"
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / "gui.log"
    logger.add(logfile, rotation="1 week", retention=5, level="INFO")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="site-intake-gui")
    parser.add_argument("--config", type=Path, default=None, help="Path to a site-intake YAML config")
    parser.add_argument("--client-id", default=None, help="Client the new project belongs to")
    args, _ = parser.parse_known_args(argv)
    return args


def main() -> int:
    """Entry point used by the ``site-intake-gui`` script."""

    _init_logging()
    args = _parse_args(sys.argv[1:])
    policy = getattr(Qt.HighDpiScaleFactorRoundingPolicy, "PassThrough", None)
    if policy is not None and hasattr(QApplication, "setHighDpiScaleFactorRoundingPolicy"):
        QApplication.setHighDpiScaleFactorRoundingPolicy(policy)
    app = QApplication(sys.argv)
    app.setApplicationName("Site Intake")

    try:
        config = load_config(args.config) if args.config else default_config()
    except ConfigError as exc:
        logger.error("Could not load configuration: {}", exc)
        QMessageBox.critical(None, "Site Intake", str(exc))
        return 4
    client_id = args.client_id or config.client_id
    if not client_id:
        QMessageBox.critical(None, "Site Intake", "A client id is required (--client-id or client_id in config).")
        return 2

    try:
        translator = translator_for(config.locale)
    except ConfigError as exc:
        logger.error("Could not load catalog: {}", exc)
        QMessageBox.critical(None, "Site Intake", str(exc))
        return 4

    window = MainWindow(config, build_store(config.store), client_id=client_id, translator=translator)
    window.setWindowIcon(window.style().standardIcon(QStyle.SP_DesktopIcon))
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
