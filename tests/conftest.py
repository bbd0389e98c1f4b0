from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from site_intake.models import Project
from site_intake.notify import RecordingNotifier
from site_intake.schema import EXTENDED_SCHEMA, WizardSchema
from site_intake.store import InMemoryProjectStore
from site_intake.wizard import IntakeWizard


class GatedStore:
    """Store whose create call blocks until the test releases it."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.gate = asyncio.Event()
        self.error = error
        self.payloads: List[Dict[str, Any]] = []

    async def create_project(self, payload: Dict[str, Any]) -> Project:
        self.payloads.append(payload)
        await self.gate.wait()
        if self.error is not None:
            raise self.error
        return Project.from_record({"id": f"p{len(self.payloads)}", **payload})

    async def list_projects(self, client_id: str) -> List[Project]:
        return []

    async def get_project(self, project_id: str) -> Project:
        raise NotImplementedError


@pytest.fixture()
def schema() -> WizardSchema:
    return EXTENDED_SCHEMA


@pytest.fixture()
def memory_store() -> InMemoryProjectStore:
    return InMemoryProjectStore()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def callbacks() -> Dict[str, list]:
    return {"created": [], "cancelled": []}


@pytest.fixture()
def wizard_factory(schema: WizardSchema, memory_store, notifier: RecordingNotifier, callbacks):
    def _factory(**overrides: Any) -> IntakeWizard:
        options: Dict[str, Any] = {
            "client_id": "client-1",
            "notifier": notifier,
            "on_created": callbacks["created"].append,
            "on_cancel": lambda: callbacks["cancelled"].append(True),
        }
        options.update(overrides)
        store = options.pop("store", memory_store)
        return IntakeWizard(options.pop("schema", schema), store, **options)

    return _factory


@pytest.fixture()
def wizard(wizard_factory) -> IntakeWizard:
    return wizard_factory()


@pytest.fixture()
def gated_store() -> GatedStore:
    return GatedStore()



@pytest.fixture()
def gated_store_factory():
    return GatedStore
