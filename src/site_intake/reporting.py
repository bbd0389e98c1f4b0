"""Project brief rendering for Site Intake."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from docx import Document
from jinja2 import Environment, FileSystemLoader

from .answers import get_field, is_blank
from .config import PricingConfig
from .i18n import Translator
from .models import Project, ProjectAddon, ProjectPayment, ProjectStatus, ProjectType
from .pricing import estimate_price, summarize_payments
from .schema import CLASSIC_SCHEMA, EXTENDED_SCHEMA, FieldKind, FieldSpec, WizardSchema

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _environment(template_path: Path) -> Environment:
    loader = FileSystemLoader(str(template_path.parent))
    autoescape = template_path.name.endswith((".html", ".html.j2"))
    return Environment(loader=loader, autoescape=autoescape)


def schema_for(project_data: Dict[str, Any]) -> WizardSchema:
    """Pick the schema a stored answer record was collected with."""

    if EXTENDED_SCHEMA.description_path in project_data or EXTENDED_SCHEMA.type_path in project_data:
        return EXTENDED_SCHEMA
    return CLASSIC_SCHEMA


def format_value(spec: FieldSpec, value: Any, translator: Translator) -> str:
    if spec.kind == FieldKind.BOOLEAN:
        return "✓" if value else "✗"
    if spec.kind == FieldKind.MULTI:
        return ", ".join(translator.option(item) for item in value)
    if spec.kind == FieldKind.CHOICE:
        return translator.option(value)
    return str(value)


def summarize_answers(
    schema: WizardSchema, answers: Dict[str, Any], translator: Optional[Translator] = None
) -> List[Dict[str, Any]]:
    """Group the filled-in, visible answers by step.

    Booleans left at False and empty strings or lists are skipped.
    """

    translator = translator or Translator()
    project_type = None
    if schema.type_path:
        project_type = ProjectType.parse(get_field(schema, answers, schema.type_path))

    sections: List[Dict[str, Any]] = []
    for step in schema.steps:
        items: List[Tuple[str, str]] = []
        for spec in schema.visible_fields(step.number, project_type):
            value = get_field(schema, answers, spec.path)
            if is_blank(value) or value is False:
                continue
            items.append((translator.field(spec.path), format_value(spec, value, translator)))
        if items:
            sections.append({"number": step.number, "title": translator(step.title), "items": items})
    return sections


def milestones(project: Project) -> List[Tuple[str, bool]]:
    return [
        ("milestone.data_collection", True),
        ("milestone.initial_design", True),
        ("milestone.development", project.progress > 40),
        ("milestone.testing", project.progress > 70),
        ("milestone.delivery", project.status == ProjectStatus.COMPLETED),
    ]


def format_amount(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else f"{amount:.2f}"


def payment_rows(payments: Sequence[ProjectPayment], translator: Translator) -> List[Dict[str, str]]:
    return [
        {
            "type": translator.label(f"payment.type.{payment.payment_type}", translator("payment.type.other")),
            "description": payment.description,
            "amount": format_amount(payment.amount),
            "status": translator.label(f"payment.status.{payment.status}", payment.status.capitalize()),
            "due_date": payment.due_date or "",
            "paid_date": payment.paid_date or "",
        }
        for payment in payments
    ]


def addon_rows(
    addons: Sequence[ProjectAddon], translator: Translator, pricing: Optional[PricingConfig]
) -> List[Dict[str, str]]:
    """Add-ons with their catalog price; add-ons missing from the price list show no price."""

    rows = []
    for addon in addons:
        price = pricing.addon_prices.get(addon.addon_key) if pricing else None
        rows.append(
            {
                "name": translator.option(addon.addon_key),
                "status": translator.label(f"addon.status.{addon.status}", addon.status.capitalize()),
                "price": "" if price is None else format_amount(price),
                "added": addon.created_at or "",
            }
        )
    return rows


def _context(
    project: Project,
    translator: Translator,
    pricing: Optional[PricingConfig],
    generated_at: Optional[str],
    payments: Sequence[ProjectPayment] = (),
    addons: Sequence[ProjectAddon] = (),
) -> Dict[str, Any]:
    schema = schema_for(project.project_data)
    estimate = estimate_price(schema, project.project_data, pricing) if pricing else None
    payment_summary = None
    if payments:
        total = estimate.total if estimate else sum(payment.amount for payment in payments)
        payment_summary = summarize_payments(payments, total)
    return {
        "project": project,
        "status": translator(f"status.{project.status.value}"),
        "goal": translator.option(project.goal) if project.goal else "",
        "sections": summarize_answers(schema, project.project_data, translator),
        "milestones": [(translator(key), done) for key, done in milestones(project)],
        "estimate": estimate,
        "currency": pricing.currency if pricing else "",
        "payments": payment_rows(payments, translator),
        "payment_summary": payment_summary,
        "format_amount": format_amount,
        "addons": addon_rows(addons, translator, pricing),
        "generated_at": generated_at or datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
        "rtl": translator.is_rtl,
    }


def generate_brief_html(
    *,
    project: Project,
    output_path: Path,
    translator: Optional[Translator] = None,
    pricing: Optional[PricingConfig] = None,
    payments: Sequence[ProjectPayment] = (),
    addons: Sequence[ProjectAddon] = (),
    template_path: Optional[Path] = None,
    generated_at: Optional[str] = None,
) -> None:
    """Render an HTML brief of a stored project, with its payments and add-ons."""

    if template_path is None:
        template_path = TEMPLATES_DIR / "brief.html.j2"
    env = _environment(template_path)
    template = env.get_template(template_path.name)
    context = _context(project, translator or Translator(), pricing, generated_at, payments, addons)
    output_path.write_text(template.render(**context), encoding="utf-8")


def generate_brief_docx(
    *,
    project: Project,
    output_path: Path,
    translator: Optional[Translator] = None,
    pricing: Optional[PricingConfig] = None,
    payments: Sequence[ProjectPayment] = (),
    addons: Sequence[ProjectAddon] = (),
    template_path: Optional[Path] = None,
    generated_at: Optional[str] = None,
) -> None:
    """Render a DOCX brief using python-docx."""

    if template_path is None:
        template_path = TEMPLATES_DIR / "brief.docx.j2"
    env = _environment(template_path)
    template = env.get_template(template_path.name)
    context = _context(project, translator or Translator(), pricing, generated_at, payments, addons)
    rendered = template.render(**context)

    document = Document()
    for line in rendered.splitlines():
        if line.startswith("# "):
            document.add_heading(line[2:], level=1)
        elif line.startswith("## "):
            document.add_heading(line[3:], level=2)
        elif line.strip() == "":
            document.add_paragraph("")
        else:
            document.add_paragraph(line)
    document.save(output_path)


__all__ = [
    "TEMPLATES_DIR",
    "schema_for",
    "format_value",
    "summarize_answers",
    "milestones",
    "format_amount",
    "payment_rows",
    "addon_rows",
    "generate_brief_html",
    "generate_brief_docx",
]
