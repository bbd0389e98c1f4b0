"""Shared models for wizard state, validation messages and stored projects."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class MessageLevel(str, Enum):
    """Severity for validation messages."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(slots=True)
class ValidationMessage:
    """Represents a validation message, optionally tied to a field path."""

    level: MessageLevel
    text: str
    path: Optional[str] = None


@dataclass(slots=True)
class ValidationResult:
    """Outcome of a submit-time validation run."""

    errors: List[ValidationMessage] = field(default_factory=list)
    warnings: List[ValidationMessage] = field(default_factory=list)

    def extend(self, messages: Iterable[ValidationMessage]) -> None:
        for msg in messages:
            if msg.level == MessageLevel.ERROR:
                self.errors.append(msg)
            elif msg.level == MessageLevel.WARNING:
                self.warnings.append(msg)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


class ProjectType(str, Enum):
    """Category of website selected in the intake wizard."""

    PORTFOLIO = "portfolio"
    ECOMMERCE = "ecommerce"
    EDUCATION = "education"
    COMPANY = "company"
    BLOG = "blog"
    SAAS = "saas"
    LANDING = "landing"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> Optional["ProjectType"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ProjectStatus(str, Enum):
    """Lifecycle of a stored project after intake."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"


@dataclass(slots=True)
class WizardState:
    """Snapshot of the intake wizard.

    ``answers`` is treated as immutable: every edit produces a new record, so a
    snapshot taken earlier stays valid for undo and debugging.
    """

    current_step: int = 1
    answers: Dict[str, Any] = field(default_factory=dict)
    submission_state: SubmissionState = SubmissionState.IDLE
    error: Optional[str] = None
    furthest_step: int = 1


@dataclass(slots=True)
class Project:
    """Project record as persisted by a project store."""

    id: str
    client_id: str
    name: str
    description: str = ""
    goal: str = ""
    status: ProjectStatus = ProjectStatus.NEW
    progress: int = 0
    project_data: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Project":
        status = record.get("status") or ProjectStatus.NEW.value
        try:
            parsed_status = ProjectStatus(status)
        except ValueError:
            parsed_status = ProjectStatus.NEW
        return cls(
            id=str(record["id"]),
            client_id=str(record.get("client_id", "")),
            name=record.get("name") or "",
            description=record.get("description") or "",
            goal=record.get("goal") or "",
            status=parsed_status,
            progress=int(record.get("progress") or 0),
            project_data=dict(record.get("project_data") or {}),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "name": self.name,
            "description": self.description,
            "goal": self.goal,
            "status": self.status.value,
            "progress": self.progress,
            "project_data": self.project_data,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class SenderType(str, Enum):
    CLIENT = "client"
    ADMIN = "admin"


@dataclass(slots=True)
class ProjectMessage:
    """One entry of a project's message feed."""

    id: str
    project_id: str
    sender: str
    message: str
    sender_type: SenderType = SenderType.CLIENT
    created_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ProjectMessage":
        try:
            sender_type = SenderType(record.get("sender_type") or SenderType.CLIENT.value)
        except ValueError:
            sender_type = SenderType.CLIENT
        return cls(
            id=str(record["id"]),
            project_id=str(record.get("project_id", "")),
            sender=record.get("sender") or "",
            message=record.get("message") or "",
            sender_type=sender_type,
            created_at=record.get("created_at"),
        )


@dataclass(slots=True)
class ProjectPayment:
    """An installment billed against a project.

    ``status`` is normally ``paid``, ``pending`` or ``overdue`` and
    ``payment_type`` one of ``initial``, ``milestone``, ``final`` or ``addon``;
    other values are kept as-is and rendered generically.
    """

    id: str
    project_id: str
    amount: float
    payment_type: str = ""
    status: str = "pending"
    description: str = ""
    due_date: Optional[str] = None
    paid_date: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ProjectPayment":
        return cls(
            id=str(record["id"]),
            project_id=str(record.get("project_id", "")),
            amount=float(record.get("amount") or 0),
            payment_type=record.get("payment_type") or "",
            status=record.get("status") or "pending",
            description=record.get("description") or "",
            due_date=record.get("due_date"),
            paid_date=record.get("paid_date"),
            created_at=record.get("created_at"),
        )


@dataclass(slots=True)
class ProjectAddon:
    """An add-on requested for a project (``active``, ``pending`` or ``inactive``)."""

    id: str
    project_id: str
    addon_key: str
    status: str = "pending"
    addon_data: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ProjectAddon":
        return cls(
            id=str(record["id"]),
            project_id=str(record.get("project_id", "")),
            addon_key=record.get("addon_key") or "",
            status=record.get("status") or "pending",
            addon_data=dict(record.get("addon_data") or {}),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )


__all__ = [
    "MessageLevel",
    "ValidationMessage",
    "ValidationResult",
    "ProjectType",
    "SubmissionState",
    "ProjectStatus",
    "WizardState",
    "Project",
    "SenderType",
    "ProjectMessage",
    "ProjectPayment",
    "ProjectAddon",
]
