"""Step schemas for the project intake wizard.

A schema is a static table: an ordered tuple of steps, each declaring the
fields it edits. The ``extended`` schema carries one conditional step whose
fields depend on the selected project type; every other step is fixed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .models import ProjectType


class FieldKind(str, Enum):
    """Value type of a schema leaf."""

    TEXT = "text"
    LONG_TEXT = "long_text"
    EMAIL = "email"
    DATE = "date"
    CHOICE = "choice"
    BOOLEAN = "boolean"
    MULTI = "multi"

    @property
    def is_string(self) -> bool:
        return self not in (FieldKind.BOOLEAN, FieldKind.MULTI)


@dataclass(frozen=True)
class FieldSpec:
    """A single editable leaf of the answer record."""

    path: str
    kind: FieldKind
    options: Tuple[str, ...] = ()
    required: bool = False

    @property
    def label(self) -> str:
        return f"field.{self.path}"

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(self.path.split("."))

    def default(self) -> Any:
        if self.kind == FieldKind.BOOLEAN:
            return False
        if self.kind == FieldKind.MULTI:
            return []
        return ""


@dataclass(frozen=True)
class StepSpec:
    """One page of the wizard."""

    number: int
    key: str
    fields: Tuple[FieldSpec, ...] = ()
    details: Mapping[ProjectType, Tuple[FieldSpec, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def title(self) -> str:
        return f"step.{self.key}"

    @property
    def is_conditional(self) -> bool:
        return bool(self.details)


@dataclass(frozen=True)
class WizardSchema:
    """Ordered steps plus the paths the submission is derived from."""

    name: str
    steps: Tuple[StepSpec, ...]
    description_path: str
    goal_path: str
    type_path: Optional[str] = None
    _index: Dict[str, FieldSpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", {spec.path: spec for spec in self.iter_fields()})

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def step(self, number: int) -> StepSpec:
        if not 1 <= number <= self.total_steps:
            raise IndexError(f"Step {number} is outside 1..{self.total_steps}")
        return self.steps[number - 1]

    def iter_fields(self) -> Iterator[FieldSpec]:
        """Yield every declared leaf, including all conditional variants."""

        for step in self.steps:
            yield from step.fields
            for variant in step.details.values():
                yield from variant

    def field(self, path: str) -> Optional[FieldSpec]:
        return self._index.get(path)

    def required_fields(self) -> List[FieldSpec]:
        return [spec for spec in self.iter_fields() if spec.required]

    def visible_fields(self, number: int, project_type: Optional[ProjectType]) -> Tuple[FieldSpec, ...]:
        """Fields shown on step ``number`` for the given project type."""

        step = self.step(number)
        if not step.is_conditional:
            return step.fields
        if project_type is None:
            return step.fields
        return step.fields + step.details.get(project_type, ())

    def details_root(self, project_type: Optional[ProjectType]) -> Optional[str]:
        """Name of the nested record that holds the type-specific answers."""

        if project_type is None:
            return None
        for step in self.steps:
            variant = step.details.get(project_type)
            if variant:
                return variant[0].segments[0]
        return None


def _text(path: str, *, required: bool = False) -> FieldSpec:
    return FieldSpec(path, FieldKind.TEXT, required=required)


def _long_text(path: str, *, required: bool = False) -> FieldSpec:
    return FieldSpec(path, FieldKind.LONG_TEXT, required=required)


def _choice(path: str, *options: str) -> FieldSpec:
    return FieldSpec(path, FieldKind.CHOICE, options=options)


def _multi(path: str, *options: str) -> FieldSpec:
    return FieldSpec(path, FieldKind.MULTI, options=options)


def _flag(path: str) -> FieldSpec:
    return FieldSpec(path, FieldKind.BOOLEAN)


SECTION_OPTIONS = ("home", "about", "services", "portfolio", "blog", "contact", "faq")
FEATURE_OPTIONS = (
    "contact_form",
    "live_chat",
    "booking",
    "search",
    "newsletter",
    "multilingual",
    "user_accounts",
    "analytics",
)
INTEGRATION_OPTIONS = ("payment_gateway", "google_analytics", "crm", "email_marketing", "maps", "social_login")
FONT_OPTIONS = ("default", "modern", "classic", "elegant")
PACKAGE_OPTIONS = ("basic", "professional", "premium")
ADDON_OPTIONS = ("seo", "maintenance", "copywriting", "logo_design", "hosting")
CONTACT_OPTIONS = ("email", "phone", "whatsapp")


def _contact_fields() -> Tuple[FieldSpec, ...]:
    return (
        _text("contactName"),
        FieldSpec("contactEmail", FieldKind.EMAIL),
        _text("contactPhone"),
        _choice("preferredContact", *CONTACT_OPTIONS),
    )


def _hosting_fields() -> Tuple[FieldSpec, ...]:
    return (
        _choice("hasDomain", "yes", "no"),
        _text("domainName"),
        _choice("needsHosting", "yes", "no", "unsure"),
    )


def _timeline_fields() -> Tuple[FieldSpec, ...]:
    return (
        FieldSpec("startDate", FieldKind.DATE),
        FieldSpec("expectedDelivery", FieldKind.DATE),
    )


def _budget_fields() -> Tuple[FieldSpec, ...]:
    return (
        _choice("package", *PACKAGE_OPTIONS),
        _multi("addons", *ADDON_OPTIONS),
    )


CLASSIC_SCHEMA = WizardSchema(
    name="classic",
    description_path="description",
    goal_path="goal",
    steps=(
        StepSpec(
            1,
            "basic",
            (
                _text("name", required=True),
                _long_text("description", required=True),
                _choice("goal", "portfolio", "ecommerce", "education", "corporate", "blog", "landing", "other"),
            ),
        ),
        StepSpec(
            2,
            "brand",
            (
                _text("preferredColors"),
                _choice("fonts", *FONT_OPTIONS),
                _long_text("inspirationWebsites"),
            ),
        ),
        StepSpec(
            3,
            "content",
            (
                _multi("sections", *SECTION_OPTIONS),
                _long_text("initialContent"),
                _flag("needsReadyContent"),
            ),
        ),
        StepSpec(
            4,
            "features",
            (
                _multi("features", *FEATURE_OPTIONS),
                _multi("integrations", *INTEGRATION_OPTIONS),
            ),
        ),
        StepSpec(5, "hosting", _hosting_fields()),
        StepSpec(
            6,
            "design",
            (
                _choice("template", "minimal", "business", "creative", "custom"),
                _choice("styleDirection", "modern", "classic", "playful", "corporate"),
            ),
        ),
        StepSpec(7, "timeline", _timeline_fields()),
        StepSpec(8, "budget", _budget_fields()),
        StepSpec(9, "confirmation", _contact_fields()),
    ),
)


_TYPE_DETAILS: Dict[ProjectType, Tuple[FieldSpec, ...]] = {
    ProjectType.PORTFOLIO: (
        _text("portfolioDetails.profession"),
        _long_text("portfolioDetails.workSamples"),
        _choice("portfolioDetails.galleryStyle", "grid", "masonry", "slider"),
        _flag("portfolioDetails.showResume"),
    ),
    ProjectType.ECOMMERCE: (
        _choice("ecommerceDetails.productCount", "1-10", "11-50", "51-200", "200+"),
        _multi(
            "ecommerceDetails.categories",
            "electronics",
            "fashion",
            "food",
            "beauty",
            "home",
            "sports",
            "books",
            "other",
        ),
        _multi("ecommerceDetails.paymentMethods", "card", "cash_on_delivery", "bank_transfer", "wallet"),
        _flag("ecommerceDetails.needsShipping"),
        _flag("ecommerceDetails.hasInventorySystem"),
    ),
    ProjectType.EDUCATION: (
        _choice("educationDetails.courseCount", "1-5", "6-20", "21+"),
        _multi("educationDetails.contentTypes", "video", "pdf", "quizzes", "live_sessions"),
        _flag("educationDetails.needsCertificates"),
        _flag("educationDetails.needsStudentAccounts"),
    ),
    ProjectType.COMPANY: (
        _text("companyDetails.industry"),
        _choice("companyDetails.employeeCount", "1-10", "11-50", "51-250", "250+"),
        _long_text("companyDetails.services"),
        _flag("companyDetails.showTeam"),
    ),
    ProjectType.BLOG: (
        _long_text("blogDetails.topics"),
        _choice("blogDetails.postFrequency", "daily", "weekly", "monthly"),
        _flag("blogDetails.needsNewsletter"),
        _flag("blogDetails.allowComments"),
    ),
    ProjectType.SAAS: (
        _long_text("saasDetails.productDescription"),
        _choice("saasDetails.pricingModel", "free", "freemium", "subscription", "one_time"),
        _multi("saasDetails.integrations", "stripe", "analytics", "crm", "email"),
        _flag("saasDetails.needsDashboard"),
    ),
}


EXTENDED_SCHEMA = WizardSchema(
    name="extended",
    description_path="shortDescription",
    goal_path="projectType",
    type_path="projectType",
    steps=(
        StepSpec(
            1,
            "basic",
            (
                _text("name", required=True),
                _long_text("shortDescription", required=True),
                _long_text("longDescription"),
            ),
        ),
        StepSpec(
            2,
            "type",
            (
                _choice("projectType", *(item.value for item in ProjectType)),
                _multi(
                    "mainGoals",
                    "sell_online",
                    "showcase_work",
                    "generate_leads",
                    "build_brand",
                    "share_content",
                    "provide_information",
                    "educate",
                ),
            ),
        ),
        StepSpec(
            3,
            "audience",
            (
                _long_text("targetAudience"),
                _choice("audienceAge", "all", "18-24", "25-34", "35-44", "45+"),
                _multi("languages", "en", "ar"),
            ),
        ),
        StepSpec(4, "details", (), MappingProxyType(_TYPE_DETAILS)),
        StepSpec(
            5,
            "brand",
            (
                _text("preferredColors"),
                _choice("fonts", *FONT_OPTIONS),
                _flag("hasLogo"),
                _long_text("inspirationWebsites"),
            ),
        ),
        StepSpec(
            6,
            "content",
            (
                _multi("sections", *SECTION_OPTIONS),
                _long_text("initialContent"),
                _flag("needsReadyContent"),
            ),
        ),
        StepSpec(
            7,
            "features",
            (
                _multi("features", *FEATURE_OPTIONS),
                _multi("integrations", *INTEGRATION_OPTIONS),
            ),
        ),
        StepSpec(
            8,
            "social",
            (
                _text("socialMedia.facebook"),
                _text("socialMedia.instagram"),
                _text("socialMedia.twitter"),
                _text("socialMedia.linkedin"),
                _text("socialMedia.tiktok"),
            ),
        ),
        StepSpec(9, "hosting", _hosting_fields()),
        StepSpec(10, "timeline", _timeline_fields() + _budget_fields()),
        StepSpec(11, "contact", _contact_fields()),
        StepSpec(12, "review"),
    ),
)


_SCHEMAS: Dict[str, WizardSchema] = {
    CLASSIC_SCHEMA.name: CLASSIC_SCHEMA,
    EXTENDED_SCHEMA.name: EXTENDED_SCHEMA,
}


def available_schemas() -> List[str]:
    """Return the names of the bundled schema variants."""

    return list(_SCHEMAS.keys())


def get_schema(name: str) -> WizardSchema:
    try:
        return _SCHEMAS[name]
    except KeyError:
        raise KeyError(f"Unknown wizard schema '{name}'") from None


def default_answers(schema: WizardSchema) -> Dict[str, Any]:
    """Build the empty answer record for ``schema``.

    Type detail records are left out; they are created on first edit.
    """

    conditional_roots = {
        spec.segments[0]
        for step in schema.steps
        for variant in step.details.values()
        for spec in variant
    }
    answers: Dict[str, Any] = {}
    for spec in schema.iter_fields():
        head, *rest = spec.segments
        if head in conditional_roots:
            continue
        if not rest:
            answers[head] = spec.default()
        else:
            answers.setdefault(head, {})[rest[0]] = spec.default()
    return answers


__all__ = [
    "FieldKind",
    "FieldSpec",
    "StepSpec",
    "WizardSchema",
    "CLASSIC_SCHEMA",
    "EXTENDED_SCHEMA",
    "available_schemas",
    "get_schema",
    "default_answers",
]
