"""
gui_entry.py - GUI Entry

Launch the PySide6 application, optionally with a folder already open
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtWidgets import QApplication
from PySide6.QtCore import Qt

from core import configure_logging
from .gui_mainwindow import MainWindow

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """GUI main entry; the first non-option argument is a folder to open"""
    argv = list(sys.argv[1:] if argv is None else argv)
    verbose = "-v" in argv or "--verbose" in argv
    configure_logging(logging.DEBUG if verbose else logging.WARNING)

    # High DPI support
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication([sys.argv[0]] + argv)
    app.setApplicationName("Rule Renamer")
    app.setApplicationVersion("1.0.0")
    app.setStyle("Fusion")

    window = MainWindow()
    window.show()

    folders = [arg for arg in argv if not arg.startswith("-")]
    if folders:
        folder = Path(folders[0]).expanduser()
        logger.debug("Opening %s from the command line", folder)
        window.open_folder(folder)

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
