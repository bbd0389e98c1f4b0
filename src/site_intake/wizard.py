"""The project intake wizard state machine.

The wizard owns the step cursor and the answer record. Field edits and step
navigation are synchronous; ``submit`` is the only coroutine and awaits the
project store. Validation happens at submit time only: ``next_step`` never
blocks on empty fields.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from .answers import get_field, remove_record, set_field, toggle_array_member
from .config import Config, TypeChangePolicy
from .i18n import Translator
from .models import (
    Project,
    ProjectType,
    SubmissionState,
    ValidationMessage,
    ValidationResult,
    WizardState,
)
from .notify import LogNotifier, NoticeKind, Notifier
from .schema import WizardSchema, default_answers, get_schema
from .store import ProjectStore, StoreError
from .submission import build_submission
from .validators import validate_answers, validate_required

CreatedCallback = Callable[[Project], None]
CancelCallback = Callable[[], None]


@dataclass(frozen=True)
class SubmitTicket:
    """A reserved submission: its request generation and payload."""

    generation: int
    payload: Dict[str, Any]


class WizardError(Exception):
    """Base class for misuse of the wizard API."""


class StepOutOfRange(WizardError):
    """Raised when jumping to a step that has not been reached yet."""


class WizardClosed(WizardError):
    """Raised when editing a wizard that was submitted or cancelled."""


class IntakeWizard:
    """Drive a user through the intake steps and submit the result."""

    def __init__(
        self,
        schema: WizardSchema,
        store: ProjectStore,
        *,
        client_id: str,
        notifier: Optional[Notifier] = None,
        translator: Optional[Translator] = None,
        on_created: Optional[CreatedCallback] = None,
        on_cancel: Optional[CancelCallback] = None,
        strict: bool = True,
        type_change_policy: TypeChangePolicy = TypeChangePolicy.RETAIN,
        history_limit: int = 50,
    ) -> None:
        if not client_id:
            raise ValueError("client_id is required to create projects")
        self.schema = schema
        self.client_id = client_id
        self._store = store
        self._notifier = notifier or LogNotifier()
        self._translate = translator or Translator()
        self._on_created = on_created
        self._on_cancel = on_cancel
        self._strict = strict
        self._policy = type_change_policy
        self._history_limit = history_limit
        self._history: List[Dict[str, Any]] = []
        self._generation = 0
        self._closed = False
        self._state = WizardState(answers=default_answers(schema))
        logger.debug("Started {} wizard for client {}", schema.name, client_id)

    @classmethod
    def from_config(
        cls,
        config: Config,
        store: ProjectStore,
        *,
        client_id: Optional[str] = None,
        **kwargs: Any,
    ) -> "IntakeWizard":
        return cls(
            get_schema(config.wizard.schema_name),
            store,
            client_id=client_id or config.client_id or "",
            strict=config.wizard.strict_paths,
            type_change_policy=config.wizard.type_change_policy,
            history_limit=config.wizard.history_limit,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def state(self) -> WizardState:
        return self._state

    @property
    def answers(self) -> Dict[str, Any]:
        return self._state.answers

    @property
    def current_step(self) -> int:
        return self._state.current_step

    @property
    def total_steps(self) -> int:
        return self.schema.total_steps

    @property
    def submission_state(self) -> SubmissionState:
        return self._state.submission_state

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def is_last_step(self) -> bool:
        return self.current_step == self.total_steps

    @property
    def is_submitting(self) -> bool:
        return self._state.submission_state == SubmissionState.SUBMITTING

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def history(self) -> Tuple[Dict[str, Any], ...]:
        return tuple(self._history)

    @property
    def project_type(self) -> Optional[ProjectType]:
        if self.schema.type_path is None:
            return None
        return ProjectType.parse(get_field(self.schema, self.answers, self.schema.type_path))

    def value(self, path: str) -> Any:
        return get_field(self.schema, self.answers, path)

    def visible_fields(self, step: Optional[int] = None):
        return self.schema.visible_fields(step or self.current_step, self.project_type)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def _ensure_open(self) -> None:
        if self._closed:
            raise WizardClosed("The wizard has already been submitted or cancelled")

    def _move_to(self, step: int) -> int:
        self._state = replace(
            self._state,
            current_step=step,
            furthest_step=max(self._state.furthest_step, step),
        )
        logger.debug("Wizard moved to step {}/{}", step, self.total_steps)
        return step

    def next_step(self) -> int:
        self._ensure_open()
        if self.is_submitting:
            return self.current_step
        if self.current_step < self.total_steps:
            return self._move_to(self.current_step + 1)
        return self.current_step

    def previous_step(self) -> int:
        self._ensure_open()
        if self.is_submitting:
            return self.current_step
        if self.current_step > 1:
            return self._move_to(self.current_step - 1)
        return self.current_step

    def go_to(self, step: int) -> int:
        """Jump directly to a step that has already been reached."""

        self._ensure_open()
        if not 1 <= step <= self._state.furthest_step:
            raise StepOutOfRange(f"Step {step} is outside 1..{self._state.furthest_step}")
        if self.is_submitting:
            return self.current_step
        return self._move_to(step)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def _commit(self, updated: Dict[str, Any]) -> Dict[str, Any]:
        if updated is self._state.answers:
            return updated
        self._history.append(self._state.answers)
        if len(self._history) > self._history_limit:
            del self._history[0]
        self._state = replace(self._state, answers=updated)
        return updated

    def set_field(self, path: str, value: Any) -> Dict[str, Any]:
        self._ensure_open()
        previous_type = self.project_type
        updated = set_field(self.schema, self.answers, path, value, strict=self._strict)
        if (
            self._policy == TypeChangePolicy.RESET
            and path == self.schema.type_path
            and updated is not self.answers
        ):
            new_type = ProjectType.parse(get_field(self.schema, updated, path))
            stale_root = self.schema.details_root(previous_type)
            if stale_root and new_type != previous_type:
                logger.info("Project type changed to {}; clearing {}", new_type, stale_root)
                updated = remove_record(updated, stale_root)
        return self._commit(updated)

    def toggle(self, path: str, item: str) -> Dict[str, Any]:
        self._ensure_open()
        return self._commit(toggle_array_member(self.schema, self.answers, path, item, strict=self._strict))

    def undo(self) -> bool:
        """Restore the answers as they were before the last edit."""

        self._ensure_open()
        if not self._history:
            return False
        self._state = replace(self._state, answers=self._history.pop())
        return True

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def validate(self) -> ValidationResult:
        return validate_answers(self.schema, self.answers)

    def missing_fields(self) -> List[ValidationMessage]:
        return validate_required(self.schema, self.answers)

    @property
    def can_submit(self) -> bool:
        return (
            not self._closed
            and self.is_last_step
            and not self.is_submitting
            and not self.missing_fields()
        )

    def build_submission(self) -> Dict[str, Any]:
        return build_submission(self.schema, self.answers, client_id=self.client_id)

    def reserve_submit(self) -> Optional[SubmitTicket]:
        """Mark a submission as in flight and return its ticket.

        Returns None when submitting is not possible right now. The state
        flips to SUBMITTING before this returns, so a host can call it on its
        UI thread and await :meth:`complete_submit` elsewhere.
        """

        if self._closed:
            logger.debug("Ignoring submit on a closed wizard")
            return None
        if self.is_submitting:
            logger.debug("Submission already in flight; ignoring duplicate submit")
            return None
        if not self.is_last_step:
            logger.debug("Submit is only available on step {}", self.total_steps)
            return None
        missing = self.missing_fields()
        if missing:
            logger.info("Submit blocked: {}", "; ".join(msg.text for msg in missing))
            return None

        payload = self.build_submission()
        self._generation += 1
        self._state = replace(self._state, submission_state=SubmissionState.SUBMITTING, error=None)
        logger.info("Submitting project '{}' (request {})", payload["name"], self._generation)
        return SubmitTicket(self._generation, payload)

    async def complete_submit(self, ticket: SubmitTicket) -> Optional[Project]:
        """Send a reserved submission to the store."""

        generation = ticket.generation
        try:
            project = await self._store.create_project(ticket.payload)
        except asyncio.CancelledError:
            logger.warning("Submission request {} was interrupted", generation)
            self._fail(generation, "Submission was interrupted")
            raise
        except StoreError as exc:
            logger.warning("Project store rejected submission: {}", exc)
            self._fail(generation, str(exc))
            return None
        except Exception as exc:
            logger.exception("Submission failed")
            self._fail(generation, str(exc))
            return None

        if generation != self._generation:
            logger.warning("Dropping stale response for request {} (project {})", generation, project.id)
            return None

        self._closed = True
        self._state = replace(self._state, submission_state=SubmissionState.SUCCEEDED)
        logger.info("Project {} created", project.id)
        self._notifier.notify(NoticeKind.SUCCESS, self._translate("wizard.created"))
        if self._on_created:
            self._on_created(project)
        return project

    async def submit(self) -> Optional[Project]:
        """Create the project; returns it on success, None when rejected or failed."""

        ticket = self.reserve_submit()
        if ticket is None:
            return None
        return await self.complete_submit(ticket)

    def _fail(self, generation: int, message: str) -> None:
        if generation != self._generation:
            logger.warning("Dropping stale failure for request {}: {}", generation, message)
            return
        self._state = replace(self._state, submission_state=SubmissionState.FAILED, error=message)
        self._notifier.notify(NoticeKind.ERROR, f"{self._translate('wizard.error')}: {message}")

    def cancel(self) -> None:
        """Discard the wizard; an in-flight submission's response is dropped."""

        if self._closed:
            return
        self._closed = True
        self._generation += 1
        logger.info("Wizard cancelled at step {}", self.current_step)
        if self._on_cancel:
            self._on_cancel()


__all__ = ["IntakeWizard", "SubmitTicket", "WizardError", "StepOutOfRange", "WizardClosed"]
