"""
gui_workers.py - GUI Worker Threads

Provides background execution of disk work to avoid blocking UI
"""

from pathlib import Path
from typing import Optional, List

from PySide6.QtCore import QThread, Signal, QObject

from core import (
    read_folder, execute_rename, execute_undo,
    RenameOptions, PreviewEntry, UndoEntry
)


class ScanWorker(QThread):
    """Folder listing worker thread"""

    # Signals
    finished = Signal(list)         # Complete, returns file list
    error = Signal(str)             # Error message

    def __init__(
        self,
        directory: Path,
        include_hidden: bool = False,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.directory = directory
        self.include_hidden = include_hidden

    def run(self):
        try:
            files = read_folder(self.directory, include_hidden=self.include_hidden)
            self.finished.emit(files)
        except Exception as e:
            self.error.emit(str(e))


class RenameWorker(QThread):
    """Rename execution worker thread"""

    # Signals
    progress = Signal(int, int, str)    # current, total, message
    finished = Signal(object)           # RenameResult
    error = Signal(str)                 # Error message

    def __init__(
        self,
        folder: Path,
        previews: List[PreviewEntry],
        options: Optional[RenameOptions] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.folder = folder
        self.previews = list(previews)
        self.options = options or RenameOptions()

    def run(self):
        try:
            def progress_callback(current: int, total: int, msg: str):
                self.progress.emit(current, total, msg)

            result = execute_rename(
                self.folder,
                self.previews,
                options=self.options,
                progress_callback=progress_callback,
            )

            self.finished.emit(result)
        except Exception as e:
            self.error.emit(str(e))


class UndoWorker(QThread):
    """Undo execution worker thread"""

    # Signals
    progress = Signal(int, int, str)    # current, total, message
    finished = Signal(object)           # UndoResult
    error = Signal(str)                 # Error message

    def __init__(
        self,
        folder: Path,
        undo_map: List[UndoEntry],
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.folder = folder
        self.undo_map = list(undo_map)

    def run(self):
        try:
            def progress_callback(current: int, total: int, msg: str):
                self.progress.emit(current, total, msg)

            result = execute_undo(self.folder, self.undo_map, progress_callback=progress_callback)
            self.finished.emit(result)
        except Exception as e:
            self.error.emit(str(e))
