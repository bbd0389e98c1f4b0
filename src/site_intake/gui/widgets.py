"""Field editors for the Site Intake GUI, one per schema field kind."""

from __future__ import annotations

from typing import Any, Dict

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QGridLayout,
    QHBoxLayout,
    QLineEdit,
    QPlainTextEdit,
    QWidget,
)

from ..i18n import Translator
from ..schema import FieldKind, FieldSpec


class FieldEditor(QWidget):
    """Base class: editors report edits, never mutate answers themselves."""

    edited = Signal(str, object)
    toggled = Signal(str, str)

    def __init__(self, spec: FieldSpec, *, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.spec = spec
        self._layout = QHBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)

    def set_value(self, value: Any) -> None:
        raise NotImplementedError


class LineEditor(FieldEditor):
    def __init__(self, spec: FieldSpec, *, parent: QWidget | None = None) -> None:
        super().__init__(spec, parent=parent)
        self._edit = QLineEdit(self)
        if spec.kind == FieldKind.DATE:
            self._edit.setPlaceholderText("YYYY-MM-DD")
        elif spec.kind == FieldKind.EMAIL:
            self._edit.setPlaceholderText("name@example.com")
        self._layout.addWidget(self._edit)
        self._edit.textEdited.connect(lambda text: self.edited.emit(spec.path, text))

    def set_value(self, value: Any) -> None:
        if self._edit.text() != value:
            self._edit.setText(value or "")


class TextAreaEditor(FieldEditor):
    def __init__(self, spec: FieldSpec, *, parent: QWidget | None = None) -> None:
        super().__init__(spec, parent=parent)
        self._edit = QPlainTextEdit(self)
        self._edit.setFixedHeight(80)
        self._layout.addWidget(self._edit)
        self._edit.textChanged.connect(self._emit)

    def _emit(self) -> None:
        self.edited.emit(self.spec.path, self._edit.toPlainText())

    def set_value(self, value: Any) -> None:
        if self._edit.toPlainText() != value:
            self._edit.blockSignals(True)
            self._edit.setPlainText(value or "")
            self._edit.blockSignals(False)


class ChoiceEditor(FieldEditor):
    def __init__(self, spec: FieldSpec, translator: Translator, *, parent: QWidget | None = None) -> None:
        super().__init__(spec, parent=parent)
        self._combo = QComboBox(self)
        self._combo.addItem("-", "")
        for option in spec.options:
            self._combo.addItem(translator.option(option), option)
        self._layout.addWidget(self._combo)
        self._combo.activated.connect(lambda index: self.edited.emit(spec.path, self._combo.itemData(index)))

    def set_value(self, value: Any) -> None:
        index = self._combo.findData(value or "")
        self._combo.setCurrentIndex(max(index, 0))


class FlagEditor(FieldEditor):
    def __init__(self, spec: FieldSpec, translator: Translator, *, parent: QWidget | None = None) -> None:
        super().__init__(spec, parent=parent)
        self._check = QCheckBox(translator.field(spec.path), self)
        self._layout.addWidget(self._check)
        self._check.clicked.connect(lambda checked: self.edited.emit(spec.path, bool(checked)))

    def set_value(self, value: Any) -> None:
        self._check.setChecked(bool(value))


class ChecklistEditor(FieldEditor):
    """A checkbox per option; each click toggles one member."""

    def __init__(self, spec: FieldSpec, translator: Translator, *, parent: QWidget | None = None) -> None:
        super().__init__(spec, parent=parent)
        grid_host = QWidget(self)
        grid = QGridLayout(grid_host)
        grid.setContentsMargins(0, 0, 0, 0)
        self._boxes: Dict[str, QCheckBox] = {}
        for index, option in enumerate(spec.options):
            box = QCheckBox(translator.option(option), grid_host)
            box.clicked.connect(lambda _checked, item=option: self.toggled.emit(spec.path, item))
            grid.addWidget(box, index // 2, index % 2)
            self._boxes[option] = box
        self._layout.addWidget(grid_host)

    def set_value(self, value: Any) -> None:
        selected = set(value or [])
        for option, box in self._boxes.items():
            box.setChecked(option in selected)


def create_editor(spec: FieldSpec, translator: Translator, *, parent: QWidget | None = None) -> FieldEditor:
    if spec.kind == FieldKind.LONG_TEXT:
        return TextAreaEditor(spec, parent=parent)
    if spec.kind == FieldKind.CHOICE:
        return ChoiceEditor(spec, translator, parent=parent)
    if spec.kind == FieldKind.BOOLEAN:
        return FlagEditor(spec, translator, parent=parent)
    if spec.kind == FieldKind.MULTI:
        return ChecklistEditor(spec, translator, parent=parent)
    return LineEditor(spec, parent=parent)


__all__ = [
    "FieldEditor",
    "LineEditor",
    "TextAreaEditor",
    "ChoiceEditor",
    "FlagEditor",
    "ChecklistEditor",
    "create_editor",
]
