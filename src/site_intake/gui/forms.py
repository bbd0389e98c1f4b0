"""Step pages used by the Site Intake GUI."""

from __future__ import annotations

from typing import Dict, Tuple

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QFormLayout, QGroupBox, QLabel, QVBoxLayout, QWidget

from ..i18n import Translator
from ..schema import FieldKind, FieldSpec, StepSpec
from ..wizard import IntakeWizard
from .widgets import FieldEditor, create_editor


class StepPage(QWidget):
    """Form for one wizard step, rebuilt when its visible fields change."""

    edited = Signal(str, object)
    toggled = Signal(str, str)

    def __init__(self, step: StepSpec, translator: Translator, *, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.step = step
        self._translator = translator
        self._fields: Tuple[FieldSpec, ...] = ()
        self._editors: Dict[str, FieldEditor] = {}

        layout = QVBoxLayout(self)
        self._group = QGroupBox(translator(step.title), self)
        self._form = QFormLayout(self._group)
        layout.addWidget(self._group)
        self._empty = QLabel("", self)
        self._empty.setWordWrap(True)
        layout.addWidget(self._empty)
        layout.addStretch(1)

    def sync(self, wizard: IntakeWizard) -> None:
        """Show the fields visible for the wizard's project type and load values."""

        fields = wizard.visible_fields(self.step.number)
        if fields != self._fields:
            self._rebuild(fields)
        for path, editor in self._editors.items():
            editor.set_value(wizard.value(path))
        if self.step.is_conditional and not fields:
            self._empty.setText("Choose a project type to see its questions.")
        else:
            self._empty.setText("")

    def _rebuild(self, fields: Tuple[FieldSpec, ...]) -> None:
        while self._form.rowCount():
            self._form.removeRow(0)
        self._editors.clear()
        for spec in fields:
            editor = create_editor(spec, self._translator, parent=self._group)
            editor.edited.connect(self.edited)
            editor.toggled.connect(self.toggled)
            if spec.kind == FieldKind.BOOLEAN:
                self._form.addRow(editor)
            else:
                self._form.addRow(self._translator.field(spec.path), editor)
            self._editors[spec.path] = editor
        self._fields = fields


__all__ = ["StepPage"]
