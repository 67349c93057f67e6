"""Allow running PomPom as a module: python -m pompom."""

import logging
import os
import signal
import sys
from pathlib import Path

from PyQt6.QtCore import QCoreApplication, QTimer

from .app import PomPomApp
from .settings import CONFIG_DIR

LOG_PATH = CONFIG_DIR / "pompom.log"


def _log_handler(path: Path) -> logging.Handler:
    """File handler for ``path``, or a NullHandler when it can't be opened."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, encoding="utf-8")
    except OSError:
        return logging.NullHandler()


def setup_logging(path: Path = LOG_PATH) -> logging.Logger:
    """Log to a file; the terminal belongs to the timer display."""
    level_name = os.getenv("POMPOM_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        handlers=[_log_handler(path)],
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pompom")


def setup_signal_handlers(app: PomPomApp) -> None:
    """Route SIGINT/SIGTERM through the normal quit path."""

    def signal_handler(signum: int, frame) -> None:
        logging.getLogger("pompom").info(
            "%s received, stopping", signal.Signals(signum).name
        )
        app.quit()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def main() -> None:
    setup_logging()

    qt_app = QCoreApplication(sys.argv)
    qt_app.setApplicationName("PomPom")

    app = PomPomApp()
    setup_signal_handlers(app)

    # Python signal handlers only run between bytecodes; wake the
    # interpreter periodically while Qt's loop is idle.
    wakeup = QTimer()
    wakeup.timeout.connect(lambda: None)
    wakeup.start(250)

    app.run()
    sys.exit(qt_app.exec())


if __name__ == "__main__":
    main()
