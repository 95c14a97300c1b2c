"""
gui_mainwindow.py - GUI Main Window

Folder selection, rule editor, live preview table, rename and undo
"""

from pathlib import Path
from typing import Optional, List

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QGridLayout,
    QLabel, QLineEdit, QPushButton, QCheckBox, QTableWidget, QTableWidgetItem,
    QProgressBar, QFileDialog, QMessageBox, QHeaderView, QGroupBox, QSplitter
)
from PySide6.QtCore import Qt, Slot, QTimer
from PySide6.QtGui import QColor

from core import (
    FileItem, PreviewEntry, UndoEntry, RenameResult, UndoResult, RenameOptions,
    generate_preview, preview_stats, can_execute
)
from .gui_rule_editor import RuleEditor
from .gui_workers import ScanWorker, RenameWorker, UndoWorker

PREVIEW_DELAY_MS = 120

CONFLICT_BACKGROUND = QColor(255, 220, 220)
RENAME_COLOR = QColor(0, 150, 0)
CONFLICT_COLOR = QColor(200, 0, 0)
MUTED_COLOR = QColor(150, 150, 150)


class MainWindow(QMainWindow):
    """Main window"""

    def __init__(self):
        super().__init__()
        self.setWindowTitle("Batch Rename Tool")
        self.setMinimumSize(900, 600)

        self.folder: Optional[Path] = None
        self.files: List[FileItem] = []
        self.previews: List[PreviewEntry] = []
        self.last_undo_map: List[UndoEntry] = []
        self.options = RenameOptions()

        self.scan_worker: Optional[ScanWorker] = None
        self.rename_worker: Optional[RenameWorker] = None
        self.undo_worker: Optional[UndoWorker] = None
        self._busy_flag = False

        # Debounce preview while rules are being edited
        self.preview_timer = QTimer(self)
        self.preview_timer.setSingleShot(True)
        self.preview_timer.setInterval(PREVIEW_DELAY_MS)
        self.preview_timer.timeout.connect(self._run_preview)

        self._init_ui()
        self.statusBar().showMessage("Ready - open a folder to begin")

    def _init_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)

        # Folder settings group
        folder_group = QGroupBox("Folder")
        folder_layout = QGridLayout(folder_group)

        folder_layout.addWidget(QLabel("Directory:"), 0, 0)
        self.dir_edit = QLineEdit()
        self.dir_edit.setPlaceholderText("Select a folder...")
        self.dir_edit.returnPressed.connect(self._open_typed_folder)
        folder_layout.addWidget(self.dir_edit, 0, 1)
        self.browse_btn = QPushButton("Browse...")
        self.browse_btn.clicked.connect(self._browse_directory)
        folder_layout.addWidget(self.browse_btn, 0, 2)
        self.refresh_btn = QPushButton("Refresh")
        self.refresh_btn.clicked.connect(self._load_folder)
        self.refresh_btn.setEnabled(False)
        folder_layout.addWidget(self.refresh_btn, 0, 3)

        self.hidden_check = QCheckBox("Include Hidden Files")
        self.hidden_check.toggled.connect(self._on_hidden_toggled)
        folder_layout.addWidget(self.hidden_check, 1, 1)

        layout.addWidget(folder_group)

        # Rules | preview
        splitter = QSplitter(Qt.Orientation.Horizontal)

        self.rule_editor = RuleEditor()
        self.rule_editor.rules_changed.connect(self._schedule_preview)
        splitter.addWidget(self.rule_editor)

        preview_widget = QWidget()
        preview_layout = QVBoxLayout(preview_widget)
        preview_layout.setContentsMargins(0, 0, 0, 0)

        self.table = QTableWidget()
        self.table.setColumnCount(3)
        self.table.setHorizontalHeaderLabels(["Original Name", "New Name", "Status"])
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        self.table.horizontalHeader().setSectionResizeMode(1, QHeaderView.ResizeMode.Stretch)
        self.table.horizontalHeader().setSectionResizeMode(2, QHeaderView.ResizeMode.ResizeToContents)
        self.table.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        preview_layout.addWidget(self.table, 1)

        self.stats_label = QLabel("")
        preview_layout.addWidget(self.stats_label)

        splitter.addWidget(preview_widget)
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 2)
        layout.addWidget(splitter, 1)

        # Progress and execution
        bottom_layout = QHBoxLayout()

        self.progress_bar = QProgressBar()
        self.progress_bar.setVisible(False)
        bottom_layout.addWidget(self.progress_bar, 1)

        self.undo_btn = QPushButton("Undo Last Rename")
        self.undo_btn.clicked.connect(self._do_undo)
        self.undo_btn.setEnabled(False)
        bottom_layout.addWidget(self.undo_btn)

        self.execute_btn = QPushButton("Rename")
        self.execute_btn.clicked.connect(self._do_execute)
        self.execute_btn.setEnabled(False)
        self.execute_btn.setStyleSheet("QPushButton { background-color: #4CAF50; color: white; font-weight: bold; padding: 8px 16px; }")
        bottom_layout.addWidget(self.execute_btn)

        layout.addLayout(bottom_layout)

    # Folder loading

    def _browse_directory(self):
        """Browse and select directory"""
        directory = QFileDialog.getExistingDirectory(self, "Select Directory")
        if directory:
            self.open_folder(Path(directory))

    def _open_typed_folder(self):
        text = self.dir_edit.text().strip()
        if text:
            self.open_folder(Path(text).expanduser())

    def open_folder(self, folder: Path):
        """Make folder the current folder and list it"""
        if folder != self.folder:
            # An undo map only applies to the folder it came from
            self.last_undo_map = []
        self.folder = folder
        self.dir_edit.setText(str(folder))
        self._load_folder()

    @Slot(bool)
    def _on_hidden_toggled(self, checked: bool):
        self.options.include_hidden = checked
        if self.folder is not None:
            self._load_folder()

    def _load_folder(self):
        """List the current folder in the background"""
        if self.folder is None or self._busy_flag:
            return

        self.statusBar().showMessage("Loading files...")
        self._set_busy(True)
        self.progress_bar.setRange(0, 0)  # Indeterminate progress

        if self.scan_worker is not None:
            # Result already delivered; let run() return before dropping the thread
            self.scan_worker.wait()
        self.scan_worker = ScanWorker(self.folder, include_hidden=self.options.include_hidden)
        self.scan_worker.finished.connect(self._on_scan_finished)
        self.scan_worker.error.connect(self._on_scan_error)
        self.scan_worker.start()

    @Slot(list)
    def _on_scan_finished(self, files: List[FileItem]):
        """Listing complete"""
        self.files = files
        self._set_busy(False)
        self.refresh_btn.setEnabled(True)
        self._run_preview()
        self.statusBar().showMessage(f"Loaded {len(files)} files", 3000)

    @Slot(str)
    def _on_scan_error(self, error: str):
        """Listing error"""
        self._set_busy(False)
        self.files = []
        self.previews = []
        self.table.setRowCount(0)
        self._update_stats()
        self.statusBar().showMessage("Error reading folder")
        QMessageBox.critical(self, "Error", f"Error reading folder: {error}")

    # Preview

    @Slot()
    def _schedule_preview(self):
        self.preview_timer.start()

    @Slot()
    def _run_preview(self):
        """Recompute the preview from the current files and rules"""
        self.previews = generate_preview(self.files, self.rule_editor.rules)
        self._update_table()
        self._update_stats()

    def _update_table(self):
        """Update table to display preview results"""
        self.table.setRowCount(len(self.previews))
        for i, p in enumerate(self.previews):
            original_item = QTableWidgetItem(p.original)
            new_item = QTableWidgetItem(p.renamed)

            if p.conflict:
                status_item = QTableWidgetItem("Conflict")
                status_item.setForeground(CONFLICT_COLOR)
                for item in (original_item, new_item, status_item):
                    item.setBackground(CONFLICT_BACKGROUND)
            elif p.skip:
                status_item = QTableWidgetItem("Skip")
                status_item.setForeground(MUTED_COLOR)
                new_item.setForeground(MUTED_COLOR)
            elif p.changed:
                status_item = QTableWidgetItem("Rename")
                status_item.setForeground(RENAME_COLOR)
                new_item.setForeground(RENAME_COLOR)
            else:
                status_item = QTableWidgetItem("No Change")
                status_item.setForeground(MUTED_COLOR)

            self.table.setItem(i, 0, original_item)
            self.table.setItem(i, 1, new_item)
            self.table.setItem(i, 2, status_item)

    def _update_stats(self):
        stats = preview_stats(self.previews)
        parts = [f"{stats.total} files"]
        if stats.changed:
            parts.append(f"{stats.changed} will rename")
        if stats.skipped:
            parts.append(f"{stats.skipped} skipped")
        if stats.conflicts:
            parts.append(f"{stats.conflicts} conflict{'s' if stats.conflicts != 1 else ''}")
        self.stats_label.setText(", ".join(parts) if self.folder is not None else "")

        if stats.conflicts:
            self.statusBar().showMessage(f"{stats.conflicts} conflict(s) detected")
        self._update_buttons()

    # Execution

    def _set_busy(self, busy: bool):
        self.browse_btn.setEnabled(not busy)
        self.dir_edit.setEnabled(not busy)
        self.hidden_check.setEnabled(not busy)
        self.rule_editor.setEnabled(not busy)
        self.progress_bar.setVisible(busy)
        self._busy_flag = busy
        self._update_buttons()

    def _update_buttons(self):
        busy = self._busy_flag
        self.execute_btn.setEnabled(not busy and can_execute(self.previews))
        self.undo_btn.setEnabled(not busy and bool(self.last_undo_map))
        self.refresh_btn.setEnabled(not busy and self.folder is not None)

    def _do_execute(self):
        """Execute rename"""
        if self.folder is None or not can_execute(self.previews):
            return

        stats = preview_stats(self.previews)
        reply = QMessageBox.question(
            self, "Confirm",
            f"Are you sure you want to rename {stats.changed} files?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if reply != QMessageBox.StandardButton.Yes:
            return

        self._set_busy(True)
        self.progress_bar.setRange(0, stats.changed * 2)
        self.statusBar().showMessage(f"Renaming {stats.changed} files...")

        if self.rename_worker is not None:
            self.rename_worker.wait()
        self.rename_worker = RenameWorker(self.folder, self.previews, options=self.options)
        self.rename_worker.progress.connect(self._on_progress)
        self.rename_worker.finished.connect(self._on_rename_finished)
        self.rename_worker.error.connect(self._on_worker_error)
        self.rename_worker.start()

    @Slot(int, int, str)
    def _on_progress(self, current: int, total: int, msg: str):
        """Execution progress update"""
        self.progress_bar.setRange(0, total)
        self.progress_bar.setValue(current)
        self.statusBar().showMessage(msg)

    @Slot(object)
    def _on_rename_finished(self, result: RenameResult):
        """Execution complete"""
        self._set_busy(False)
        if result.success > 0:
            self.last_undo_map = list(result.undo_map)

        msg = f"Rename complete!\n\nSuccess: {result.success}\nFailed: {result.failed}"
        if result.failed:
            msg += "\n\nFailure Details:\n"
            for err in result.errors[:5]:
                msg += f"  {err.file}: {err.error}\n"
            if len(result.errors) > 5:
                msg += f"  ... and {len(result.errors) - 5} more failures"
            QMessageBox.warning(self, "Complete", msg)
        else:
            QMessageBox.information(self, "Complete", msg)

        self.statusBar().showMessage(f"Done. {result.success} renamed, {result.failed} failed.")
        self._load_folder()

    def _do_undo(self):
        """Undo the last rename batch"""
        if self.folder is None or not self.last_undo_map:
            return

        reply = QMessageBox.question(
            self, "Confirm",
            f"Restore the original names of {len(self.last_undo_map)} files?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if reply != QMessageBox.StandardButton.Yes:
            return

        self._set_busy(True)
        self.statusBar().showMessage("Undoing...")

        if self.undo_worker is not None:
            self.undo_worker.wait()
        self.undo_worker = UndoWorker(self.folder, self.last_undo_map)
        self.undo_worker.progress.connect(self._on_progress)
        self.undo_worker.finished.connect(self._on_undo_finished)
        self.undo_worker.error.connect(self._on_worker_error)
        self.undo_worker.start()

    @Slot(object)
    def _on_undo_finished(self, result: UndoResult):
        self.last_undo_map = []
        self._set_busy(False)

        msg = f"Undo: {result.success} restored"
        if result.failed:
            msg += f", {result.failed} failed"
            details = "\n".join(f"  {e.file}: {e.error}" for e in result.errors[:5])
            QMessageBox.warning(self, "Undo", f"{msg}\n\n{details}")
        else:
            QMessageBox.information(self, "Undo", msg)

        self.statusBar().showMessage(msg)
        self._load_folder()

    @Slot(str)
    def _on_worker_error(self, error: str):
        """Execution error"""
        self._set_busy(False)
        QMessageBox.critical(self, "Error", f"Execution failed: {error}")
