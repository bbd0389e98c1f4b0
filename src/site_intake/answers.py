"""Copy-on-write edits of the nested answer record.

Every function here is pure: the record passed in is never mutated. Only the
dicts along the edited path are copied; sibling values are shared with the
previous snapshot.
"""

from __future__ import annotations

from typing import Any, Dict, List

from loguru import logger

from .schema import FieldKind, FieldSpec, WizardSchema


class InvalidFieldPath(KeyError):
    """Raised when a path does not name a declared leaf of the schema."""

    def __init__(self, path: str, reason: str = "is not declared by the schema") -> None:
        super().__init__(path)
        self.path = path
        self.reason = reason

    def __str__(self) -> str:
        return f"Field path '{self.path}' {self.reason}"


class InvalidFieldValue(ValueError):
    """Raised when a value does not fit the declared kind or options."""


def _resolve(schema: WizardSchema, path: str) -> FieldSpec:
    spec = schema.field(path)
    if spec is None:
        raise InvalidFieldPath(path)
    return spec


def _check_value(spec: FieldSpec, value: Any) -> Any:
    if spec.kind == FieldKind.BOOLEAN:
        if not isinstance(value, bool):
            raise InvalidFieldValue(f"{spec.path} expects a boolean, got {value!r}")
        return value
    if spec.kind == FieldKind.MULTI:
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
            raise InvalidFieldValue(f"{spec.path} expects a list of strings, got {value!r}")
        items = list(dict.fromkeys(value))
        for item in items:
            _check_option(spec, item)
        return items
    if not isinstance(value, str):
        raise InvalidFieldValue(f"{spec.path} expects a string, got {value!r}")
    if spec.kind == FieldKind.CHOICE and value:
        _check_option(spec, value)
    return value


def _check_option(spec: FieldSpec, item: Any) -> None:
    if not isinstance(item, str):
        raise InvalidFieldValue(f"{spec.path} options are strings, got {item!r}")
    if spec.options and item not in spec.options:
        raise InvalidFieldValue(f"'{item}' is not an option of {spec.path}")


def get_field(schema: WizardSchema, answers: Dict[str, Any], path: str) -> Any:
    """Return the value at ``path``, or the field default when unset."""

    spec = _resolve(schema, path)
    node: Any = answers
    for segment in spec.segments:
        if not isinstance(node, dict) or segment not in node:
            return spec.default()
        node = node[segment]
    return node


def _replace_leaf(answers: Dict[str, Any], segments: tuple, value: Any) -> Dict[str, Any]:
    head, *rest = segments
    updated = dict(answers)
    if not rest:
        updated[head] = value
        return updated
    child = answers.get(head)
    updated[head] = _replace_leaf(child if isinstance(child, dict) else {}, tuple(rest), value)
    return updated


def set_field(
    schema: WizardSchema,
    answers: Dict[str, Any],
    path: str,
    value: Any,
    *,
    strict: bool = True,
) -> Dict[str, Any]:
    """Return a new record with the leaf at ``path`` replaced by ``value``.

    With ``strict`` unset, an undeclared path or mistyped value is logged and
    the original record is returned unchanged.
    """

    try:
        spec = _resolve(schema, path)
        checked = _check_value(spec, value)
    except (InvalidFieldPath, InvalidFieldValue) as exc:
        if strict:
            raise
        logger.warning("Ignoring edit of {}: {}", path, exc)
        return answers
    return _replace_leaf(answers, spec.segments, checked)


def toggle_array_member(
    schema: WizardSchema,
    answers: Dict[str, Any],
    path: str,
    item: str,
    *,
    strict: bool = True,
) -> Dict[str, Any]:
    """Add ``item`` to the multi field at ``path``, or remove it if present."""

    try:
        spec = _resolve(schema, path)
        if spec.kind != FieldKind.MULTI:
            raise InvalidFieldPath(path, "is not a multi-select field")
        _check_option(spec, item)
    except (InvalidFieldPath, InvalidFieldValue) as exc:
        if strict:
            raise
        logger.warning("Ignoring toggle of {} on {}: {}", item, path, exc)
        return answers

    current: List[str] = list(get_field(schema, answers, path))
    if item in current:
        current = [member for member in current if member != item]
    else:
        current.append(item)
    head = spec.segments[0]
    record = answers.get(head)
    only_leaf = record is None or isinstance(record, dict) and set(record) <= {spec.segments[-1]}
    # A detail record emptied by the toggle is dropped, as if never created.
    if not current and len(spec.segments) == 2 and only_leaf:
        return remove_record(answers, head)
    return _replace_leaf(answers, spec.segments, current)


def remove_record(answers: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Return a copy of ``answers`` without the top-level entry ``key``."""

    if key not in answers:
        return answers
    return {name: value for name, value in answers.items() if name != key}


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return not value
    return False


__all__ = [
    "InvalidFieldPath",
    "InvalidFieldValue",
    "get_field",
    "set_field",
    "toggle_array_member",
    "remove_record",
    "is_blank",
]
