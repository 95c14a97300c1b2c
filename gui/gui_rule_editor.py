"""
gui_rule_editor.py - Rule List Editor

Ordered rule list with add / move / remove, and a settings form generated
from the selected rule's fields
"""

from dataclasses import fields
from enum import Enum
from typing import Any, List, Optional

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QGroupBox, QComboBox,
    QPushButton, QListWidget, QListWidgetItem, QLineEdit, QCheckBox, QSpinBox,
    QLabel
)
from PySide6.QtCore import Signal, Slot

from core import Rule, RULE_TYPES, update_rule, describe_rule

# Fields that accept negative numbers
SIGNED_FIELDS = {"position", "start"}


class RuleEditor(QWidget):
    """Rule pipeline editor"""

    # Emitted whenever the rule list or a rule setting changes
    rules_changed = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.rules: List[Rule] = []
        self._init_ui()

    def _init_ui(self):
        layout = QVBoxLayout(self)

        # Rule type selection
        add_layout = QHBoxLayout()
        self.type_combo = QComboBox()
        for tag, cls in RULE_TYPES.items():
            self.type_combo.addItem(cls.label, tag)
        add_layout.addWidget(self.type_combo, 1)
        self.add_btn = QPushButton("Add Rule")
        self.add_btn.clicked.connect(self._add_rule)
        add_layout.addWidget(self.add_btn)
        layout.addLayout(add_layout)

        # Ordered rule list
        self.rule_list = QListWidget()
        self.rule_list.currentRowChanged.connect(self._on_selection_changed)
        layout.addWidget(self.rule_list, 1)

        # List controls
        buttons_layout = QHBoxLayout()
        self.up_btn = QPushButton("Up")
        self.up_btn.clicked.connect(lambda: self._move_rule(-1))
        self.down_btn = QPushButton("Down")
        self.down_btn.clicked.connect(lambda: self._move_rule(1))
        self.remove_btn = QPushButton("Remove")
        self.remove_btn.clicked.connect(self._remove_rule)
        self.clear_btn = QPushButton("Clear")
        self.clear_btn.clicked.connect(self.clear)
        for btn in (self.up_btn, self.down_btn, self.remove_btn, self.clear_btn):
            buttons_layout.addWidget(btn)
        layout.addLayout(buttons_layout)

        # Settings of the selected rule
        self.settings_group = QGroupBox("Rule Settings")
        self.form = QFormLayout(self.settings_group)
        layout.addWidget(self.settings_group)

        self._rebuild_form()
        self._update_buttons()

    def _item_text(self, rule: Rule) -> str:
        return f"{rule.label}: {describe_rule(rule)}"

    def _refresh_list(self, select: Optional[int] = None):
        """Redraw the list and select a row"""
        self.rule_list.blockSignals(True)
        self.rule_list.clear()
        for rule in self.rules:
            self.rule_list.addItem(QListWidgetItem(self._item_text(rule)))
        self.rule_list.blockSignals(False)

        if select is not None and self.rules:
            self.rule_list.setCurrentRow(max(0, min(select, len(self.rules) - 1)))
        else:
            self._rebuild_form()
        self._update_buttons()

    def _update_buttons(self):
        row = self.rule_list.currentRow()
        has_selection = 0 <= row < len(self.rules)
        self.up_btn.setEnabled(has_selection and row > 0)
        self.down_btn.setEnabled(has_selection and row < len(self.rules) - 1)
        self.remove_btn.setEnabled(has_selection)
        self.clear_btn.setEnabled(bool(self.rules))

    @Slot()
    def _add_rule(self):
        tag = self.type_combo.currentData()
        self.rules.append(RULE_TYPES[tag]())
        self._refresh_list(select=len(self.rules) - 1)
        self.rules_changed.emit()

    @Slot()
    def _remove_rule(self):
        row = self.rule_list.currentRow()
        if not 0 <= row < len(self.rules):
            return
        del self.rules[row]
        self._refresh_list(select=row)
        self.rules_changed.emit()

    def _move_rule(self, offset: int):
        row = self.rule_list.currentRow()
        target = row + offset
        if not (0 <= row < len(self.rules) and 0 <= target < len(self.rules)):
            return
        self.rules[row], self.rules[target] = self.rules[target], self.rules[row]
        self._refresh_list(select=target)
        self.rules_changed.emit()

    @Slot()
    def clear(self):
        """Remove every rule"""
        if not self.rules:
            return
        self.rules = []
        self._refresh_list()
        self.rules_changed.emit()

    @Slot(int)
    def _on_selection_changed(self, row: int):
        self._rebuild_form()
        self._update_buttons()

    def _rebuild_form(self):
        """Create one input per field of the selected rule"""
        while self.form.rowCount():
            self.form.removeRow(0)

        row = self.rule_list.currentRow()
        if not 0 <= row < len(self.rules):
            self.form.addRow(QLabel("Select or add a rule"))
            return

        rule = self.rules[row]
        rule_fields = fields(rule)
        if not rule_fields:
            self.form.addRow(QLabel(rule.__doc__ or ""))
            return

        for f in rule_fields:
            label = f.name.replace("_", " ").capitalize()
            self.form.addRow(label, self._create_input(f.name, getattr(rule, f.name)))

    def _create_input(self, name: str, value: Any) -> QWidget:
        """Input widget matching the type of a rule field"""
        if isinstance(value, Enum):
            combo = QComboBox()
            combo.addItems([m.value for m in type(value)])
            combo.setCurrentText(value.value)
            combo.currentTextChanged.connect(lambda v, n=name: self._on_field_changed(n, v))
            return combo
        if isinstance(value, bool):
            check = QCheckBox()
            check.setChecked(value)
            check.toggled.connect(lambda v, n=name: self._on_field_changed(n, v))
            return check
        if isinstance(value, int):
            spin = QSpinBox()
            spin.setRange(-9999 if name in SIGNED_FIELDS else 0, 999999)
            spin.setValue(value)
            spin.valueChanged.connect(lambda v, n=name: self._on_field_changed(n, v))
            return spin
        edit = QLineEdit()
        if isinstance(value, list):
            edit.setText(", ".join(value))
            edit.setPlaceholderText("txt, jpg, png")
        else:
            edit.setText(value)
        edit.textEdited.connect(lambda v, n=name: self._on_field_changed(n, v))
        return edit

    def _on_field_changed(self, name: str, value: Any):
        row = self.rule_list.currentRow()
        if not 0 <= row < len(self.rules):
            return
        rule = update_rule(self.rules[row], **{name: value})
        self.rules[row] = rule
        item = self.rule_list.item(row)
        if item is not None:
            item.setText(self._item_text(rule))
        self.rules_changed.emit()
