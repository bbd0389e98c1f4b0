"""Assembly of the payload handed to the project store."""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict

from .answers import get_field
from .models import ProjectStatus
from .schema import WizardSchema


def build_submission(schema: WizardSchema, answers: Dict[str, Any], *, client_id: str) -> Dict[str, Any]:
    """Derive the create-project payload from the answer record.

    The answers are embedded verbatim (as a deep copy) under ``project_data``;
    the store does not interpret their shape.
    """

    return {
        "client_id": client_id,
        "name": get_field(schema, answers, "name").strip(),
        "description": get_field(schema, answers, schema.description_path).strip(),
        "goal": get_field(schema, answers, schema.goal_path),
        "status": ProjectStatus.NEW.value,
        "progress": 0,
        "project_data": deepcopy(answers),
    }


__all__ = ["build_submission"]
