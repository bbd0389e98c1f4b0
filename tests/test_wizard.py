from __future__ import annotations

import asyncio

import pytest

from site_intake.answers import InvalidFieldPath
from site_intake.config import TypeChangePolicy
from site_intake.models import Project, SubmissionState
from site_intake.notify import NoticeKind
from site_intake.schema import CLASSIC_SCHEMA
from site_intake.store import StoreError
from site_intake.wizard import IntakeWizard, StepOutOfRange, WizardClosed


def _fill_and_finish(wizard: IntakeWizard) -> None:
    wizard.set_field("name", "Acme Store")
    wizard.set_field(wizard.schema.description_path, "A shop")
    while not wizard.is_last_step:
        wizard.next_step()


def test_requires_client_id(schema, memory_store) -> None:
    with pytest.raises(ValueError):
        IntakeWizard(schema, memory_store, client_id="")


def test_starts_on_first_step(wizard: IntakeWizard) -> None:
    assert wizard.current_step == 1
    assert wizard.total_steps == 12
    assert wizard.submission_state == SubmissionState.IDLE
    assert wizard.value("name") == ""


def test_step_bounds(wizard: IntakeWizard) -> None:
    assert wizard.previous_step() == 1
    for _ in range(20):
        wizard.next_step()
    assert wizard.current_step == wizard.total_steps
    assert wizard.next_step() == wizard.total_steps


def test_next_does_not_require_fields(wizard: IntakeWizard) -> None:
    wizard.next_step()
    assert wizard.current_step == 2


def test_navigation_keeps_answers(wizard: IntakeWizard) -> None:
    wizard.set_field("name", "Acme")
    wizard.toggle("sections", "home")
    before = wizard.answers
    for move in ("next", "next", "previous", "next", "previous", "previous", "previous"):
        getattr(wizard, f"{move}_step")()
    assert wizard.answers is before


def test_set_field_replaces_single_leaf(wizard: IntakeWizard) -> None:
    wizard.set_field("socialMedia.facebook", "acme")
    snapshot = wizard.answers
    wizard.set_field("socialMedia.facebook", "acme.shop")
    assert wizard.value("socialMedia.facebook") == "acme.shop"
    assert wizard.answers["socialMedia"]["instagram"] == snapshot["socialMedia"]["instagram"]
    assert snapshot["socialMedia"]["facebook"] == "acme"


def test_category_toggle_scenario(wizard: IntakeWizard) -> None:
    wizard.set_field("projectType", "ecommerce")
    wizard.toggle("ecommerceDetails.categories", "electronics")
    wizard.toggle("ecommerceDetails.categories", "fashion")
    wizard.toggle("ecommerceDetails.categories", "electronics")
    assert wizard.value("ecommerceDetails.categories") == ["fashion"]


def test_unknown_path_raises_in_strict_mode(wizard: IntakeWizard) -> None:
    with pytest.raises(InvalidFieldPath):
        wizard.set_field("nmae", "typo")


def test_unknown_path_is_ignored_when_lenient(wizard_factory) -> None:
    wizard = wizard_factory(strict=False)
    before = wizard.answers
    wizard.set_field("nmae", "typo")
    assert wizard.answers is before
    assert wizard.history == ()


def test_go_to_reached_steps_only(wizard: IntakeWizard) -> None:
    wizard.next_step()
    wizard.next_step()
    wizard.go_to(1)
    assert wizard.current_step == 1
    assert wizard.go_to(3) == 3
    with pytest.raises(StepOutOfRange):
        wizard.go_to(4)
    with pytest.raises(StepOutOfRange):
        wizard.go_to(0)


def test_undo_restores_previous_answers(wizard: IntakeWizard) -> None:
    wizard.set_field("name", "First")
    wizard.set_field("name", "Second")
    assert wizard.undo()
    assert wizard.value("name") == "First"
    assert wizard.undo()
    assert wizard.value("name") == ""
    assert not wizard.undo()


def test_history_is_bounded(wizard_factory) -> None:
    wizard = wizard_factory(history_limit=3)
    for index in range(10):
        wizard.set_field("name", f"v{index}")
    assert len(wizard.history) == 3


def test_type_change_retains_details_by_default(wizard: IntakeWizard) -> None:
    wizard.set_field("projectType", "ecommerce")
    wizard.toggle("ecommerceDetails.categories", "books")
    wizard.set_field("projectType", "blog")
    assert wizard.answers["ecommerceDetails"]["categories"] == ["books"]
    wizard.set_field("projectType", "ecommerce")
    assert wizard.value("ecommerceDetails.categories") == ["books"]


def test_type_change_reset_policy_clears_details(wizard_factory) -> None:
    wizard = wizard_factory(type_change_policy=TypeChangePolicy.RESET)
    wizard.set_field("projectType", "ecommerce")
    wizard.toggle("ecommerceDetails.categories", "books")
    wizard.set_field("projectType", "blog")
    assert "ecommerceDetails" not in wizard.answers
    wizard.set_field("projectType", "ecommerce")
    assert wizard.value("ecommerceDetails.categories") == []


def test_visible_fields_follow_project_type(wizard: IntakeWizard) -> None:
    assert wizard.visible_fields(4) == ()
    wizard.set_field("projectType", "portfolio")
    paths = [spec.path for spec in wizard.visible_fields(4)]
    assert "portfolioDetails.profession" in paths
    assert all(path.startswith("portfolioDetails.") for path in paths)


def test_can_submit_requires_last_step_and_fields(wizard: IntakeWizard) -> None:
    assert not wizard.can_submit
    wizard.set_field("name", "Acme Store")
    while not wizard.is_last_step:
        wizard.next_step()
    assert not wizard.can_submit
    assert [msg.path for msg in wizard.missing_fields()] == ["shortDescription"]
    wizard.set_field("shortDescription", "A shop")
    assert wizard.can_submit


@pytest.mark.asyncio
async def test_submit_rejected_when_required_missing(wizard: IntakeWizard, memory_store) -> None:
    while not wizard.is_last_step:
        wizard.next_step()
    wizard.set_field("name", "   ")
    assert await wizard.submit() is None
    assert wizard.submission_state == SubmissionState.IDLE
    assert wizard.generation == 0
    assert await memory_store.list_projects("client-1") == []


@pytest.mark.asyncio
async def test_submit_rejected_before_last_step(wizard: IntakeWizard) -> None:
    wizard.set_field("name", "Acme Store")
    wizard.set_field("shortDescription", "A shop")
    assert await wizard.submit() is None
    assert wizard.submission_state == SubmissionState.IDLE


@pytest.mark.asyncio
async def test_submit_end_to_end(wizard: IntakeWizard, memory_store, notifier, callbacks) -> None:
    _fill_and_finish(wizard)
    project = await wizard.submit()

    assert project is not None
    assert callbacks["created"] == [project]
    assert wizard.submission_state == SubmissionState.SUCCEEDED
    assert wizard.closed
    assert notifier.notices == [(NoticeKind.SUCCESS, "Project created successfully")]
    stored = await memory_store.get_project(project.id)
    assert stored.name == "Acme Store"
    assert stored.description == "A shop"
    assert stored.project_data["name"] == "Acme Store"


@pytest.mark.asyncio
async def test_closed_wizard_rejects_edits(wizard: IntakeWizard) -> None:
    _fill_and_finish(wizard)
    await wizard.submit()
    with pytest.raises(WizardClosed):
        wizard.set_field("name", "Other")
    with pytest.raises(WizardClosed):
        wizard.next_step()
    assert await wizard.submit() is None


@pytest.mark.asyncio
async def test_duplicate_submit_while_pending(wizard_factory, gated_store, callbacks) -> None:
    wizard = wizard_factory(store=gated_store)
    _fill_and_finish(wizard)

    first = asyncio.create_task(wizard.submit())
    await asyncio.sleep(0)
    assert wizard.is_submitting
    assert not wizard.can_submit
    assert await wizard.submit() is None
    assert wizard.previous_step() == wizard.total_steps

    gated_store.gate.set()
    project = await first
    assert project is not None and project.id == "p1"
    assert len(gated_store.payloads) == 1
    assert callbacks["created"] == [project]


@pytest.mark.asyncio
async def test_submit_failure_keeps_answers_and_allows_retry(wizard_factory, notifier, callbacks) -> None:
    class FlakyStore:
        def __init__(self) -> None:
            self.calls = 0

        async def create_project(self, payload):
            self.calls += 1
            if self.calls == 1:
                raise StoreError("Connection timeout", transient=True)
            return Project.from_record({"id": "p1", **payload})

    store = FlakyStore()
    wizard = wizard_factory(store=store)
    _fill_and_finish(wizard)
    answers = wizard.answers

    assert await wizard.submit() is None
    assert wizard.submission_state == SubmissionState.FAILED
    assert wizard.error == "Connection timeout"
    assert wizard.current_step == wizard.total_steps
    assert wizard.answers is answers
    assert not wizard.closed
    assert notifier.notices == [(NoticeKind.ERROR, "Error: Connection timeout")]

    project = await wizard.submit()
    assert project is not None
    assert store.calls == 2
    assert wizard.submission_state == SubmissionState.SUCCEEDED
    assert wizard.error is None
    assert callbacks["created"] == [project]


@pytest.mark.asyncio
async def test_unexpected_store_exception_is_contained(wizard_factory, notifier) -> None:
    class BrokenStore:
        async def create_project(self, payload):
            raise RuntimeError("boom")

    wizard = wizard_factory(store=BrokenStore())
    _fill_and_finish(wizard)
    assert await wizard.submit() is None
    assert wizard.submission_state == SubmissionState.FAILED
    assert notifier.notices[-1] == (NoticeKind.ERROR, "Error: boom")


@pytest.mark.asyncio
async def test_cancel_drops_in_flight_response(wizard_factory, gated_store, notifier, callbacks) -> None:
    wizard = wizard_factory(store=gated_store)
    _fill_and_finish(wizard)

    pending = asyncio.create_task(wizard.submit())
    await asyncio.sleep(0)
    wizard.cancel()
    gated_store.gate.set()

    assert await pending is None
    assert callbacks["created"] == []
    assert callbacks["cancelled"] == [True]
    assert notifier.notices == []


@pytest.mark.asyncio
async def test_cancel_drops_in_flight_failure(wizard_factory, gated_store_factory, notifier, callbacks) -> None:
    store = gated_store_factory(error=StoreError("Connection timeout", transient=True))
    wizard = wizard_factory(store=store)
    _fill_and_finish(wizard)

    pending = asyncio.create_task(wizard.submit())
    await asyncio.sleep(0)
    wizard.cancel()
    store.gate.set()

    assert await pending is None
    assert len(store.payloads) == 1
    assert wizard.submission_state != SubmissionState.FAILED
    assert wizard.error is None
    assert notifier.notices == []
    assert callbacks["cancelled"] == [True]


@pytest.mark.asyncio
async def test_cancelled_submit_task_does_not_stay_submitting(wizard_factory, gated_store, callbacks) -> None:
    wizard = wizard_factory(store=gated_store)
    _fill_and_finish(wizard)

    pending = asyncio.create_task(wizard.submit())
    await asyncio.sleep(0)
    assert wizard.is_submitting
    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending

    assert wizard.submission_state == SubmissionState.FAILED
    assert wizard.error == "Submission was interrupted"
    assert not wizard.closed
    assert wizard.can_submit
    assert wizard.previous_step() == wizard.total_steps - 1
    assert callbacks["created"] == []


@pytest.mark.asyncio
async def test_reserve_submit_marks_request_in_flight(wizard_factory, gated_store, callbacks) -> None:
    wizard = wizard_factory(store=gated_store)
    _fill_and_finish(wizard)

    ticket = wizard.reserve_submit()
    assert ticket is not None
    assert ticket.payload["name"] == "Acme Store"
    assert wizard.is_submitting
    assert not wizard.can_submit
    assert wizard.reserve_submit() is None
    assert wizard.previous_step() == wizard.total_steps

    gated_store.gate.set()
    project = await wizard.complete_submit(ticket)
    assert project is not None
    assert wizard.submission_state == SubmissionState.SUCCEEDED
    assert callbacks["created"] == [project]
    assert len(gated_store.payloads) == 1


def test_reserve_submit_needs_last_step(wizard: IntakeWizard) -> None:
    wizard.set_field("name", "Acme Store")
    assert wizard.reserve_submit() is None
    assert not wizard.is_submitting


def test_cancel_is_invoked_once(wizard: IntakeWizard, callbacks) -> None:
    wizard.cancel()
    wizard.cancel()
    assert callbacks["cancelled"] == [True]
    assert wizard.closed
    with pytest.raises(WizardClosed):
        wizard.toggle("sections", "home")


def test_classic_schema_wizard(wizard_factory) -> None:
    wizard = wizard_factory(schema=CLASSIC_SCHEMA)
    assert wizard.total_steps == 9
    assert wizard.project_type is None
    wizard.set_field("goal", "ecommerce")
    payload = wizard.build_submission()
    assert payload["goal"] == "ecommerce"
    assert payload["client_id"] == "client-1"


def test_from_config_uses_wizard_section(memory_store) -> None:
    from site_intake.config import Config, WizardConfig

    config = Config(client_id="c-9", wizard=WizardConfig(schema="classic", strict_paths=False))
    wizard = IntakeWizard.from_config(config, memory_store)
    assert wizard.schema is CLASSIC_SCHEMA
    assert wizard.client_id == "c-9"
    wizard.set_field("projectType", "blog")
    assert "projectType" not in wizard.answers
