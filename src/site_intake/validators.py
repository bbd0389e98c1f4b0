"""Submit-time validation of an answer record."""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Dict, List, Optional

from .answers import get_field, is_blank
from .models import MessageLevel, ValidationMessage, ValidationResult
from .schema import FieldKind, WizardSchema

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_required(schema: WizardSchema, answers: Dict[str, Any]) -> List[ValidationMessage]:
    """Report every schema-required field that is still empty."""

    messages: List[ValidationMessage] = []
    for spec in schema.required_fields():
        if is_blank(get_field(schema, answers, spec.path)):
            messages.append(
                ValidationMessage(MessageLevel.ERROR, f"Missing required field '{spec.path}'", spec.path)
            )
    return messages


def parse_date(raw: str) -> Optional[date]:
    """Parse an ISO ``YYYY-MM-DD`` date, returning None when malformed."""

    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        return None


def validate_formats(schema: WizardSchema, answers: Dict[str, Any]) -> List[ValidationMessage]:
    messages: List[ValidationMessage] = []
    for spec in schema.iter_fields():
        if spec.kind not in (FieldKind.EMAIL, FieldKind.DATE):
            continue
        value = get_field(schema, answers, spec.path)
        if is_blank(value):
            continue
        if spec.kind == FieldKind.EMAIL and not _EMAIL_RE.match(value.strip()):
            messages.append(
                ValidationMessage(MessageLevel.WARNING, f"'{value}' does not look like an email address", spec.path)
            )
        elif spec.kind == FieldKind.DATE and parse_date(value) is None:
            messages.append(
                ValidationMessage(MessageLevel.WARNING, f"'{value}' is not a YYYY-MM-DD date", spec.path)
            )
    return messages


def validate_timeline(schema: WizardSchema, answers: Dict[str, Any]) -> List[ValidationMessage]:
    if schema.field("startDate") is None or schema.field("expectedDelivery") is None:
        return []
    start = parse_date(get_field(schema, answers, "startDate") or "")
    delivery = parse_date(get_field(schema, answers, "expectedDelivery") or "")
    if start and delivery and delivery < start:
        return [
            ValidationMessage(
                MessageLevel.WARNING,
                f"Expected delivery {delivery.isoformat()} is before the start date {start.isoformat()}",
                "expectedDelivery",
            )
        ]
    return []


def validate_domain(schema: WizardSchema, answers: Dict[str, Any]) -> List[ValidationMessage]:
    if schema.field("hasDomain") is None:
        return []
    if get_field(schema, answers, "hasDomain") == "yes" and is_blank(get_field(schema, answers, "domainName")):
        return [
            ValidationMessage(
                MessageLevel.WARNING,
                "A domain is owned but no domain name was given",
                "domainName",
            )
        ]
    return []


def validate_answers(schema: WizardSchema, answers: Dict[str, Any]) -> ValidationResult:
    """Run every check; only errors block submission."""

    result = ValidationResult()
    result.extend(validate_required(schema, answers))
    result.extend(validate_formats(schema, answers))
    result.extend(validate_timeline(schema, answers))
    result.extend(validate_domain(schema, answers))
    return result


__all__ = [
    "parse_date",
    "validate_required",
    "validate_formats",
    "validate_timeline",
    "validate_domain",
    "validate_answers",
]
