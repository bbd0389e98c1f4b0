from __future__ import annotations

from pathlib import Path

import pytest
from docx import Document

from site_intake.answers import set_field
from site_intake.config import PricingConfig
from site_intake.i18n import Translator
from site_intake.models import Project, ProjectAddon, ProjectPayment, ProjectStatus
from site_intake.reporting import (
    generate_brief_docx,
    generate_brief_html,
    milestones,
    schema_for,
    summarize_answers,
)
from site_intake.schema import CLASSIC_SCHEMA, EXTENDED_SCHEMA, default_answers


@pytest.fixture()
def project() -> Project:
    answers = default_answers(EXTENDED_SCHEMA)
    for path, value in [
        ("name", "Acme <Store>"),
        ("shortDescription", "A shop"),
        ("projectType", "ecommerce"),
        ("ecommerceDetails.categories", ["books", "home"]),
        ("ecommerceDetails.needsShipping", True),
        ("sections", ["home", "contact"]),
    ]:
        answers = set_field(EXTENDED_SCHEMA, answers, path, value)
    return Project(
        id="p1",
        client_id="client-1",
        name="Acme <Store>",
        description="A shop",
        goal="ecommerce",
        status=ProjectStatus.IN_PROGRESS,
        progress=55,
        project_data=answers,
        created_at="2025-01-01T00:00:00+00:00",
    )


def test_schema_detection(project: Project) -> None:
    assert schema_for(project.project_data) is EXTENDED_SCHEMA
    assert schema_for(default_answers(CLASSIC_SCHEMA)) is CLASSIC_SCHEMA


def test_summary_groups_filled_answers(project: Project) -> None:
    sections = summarize_answers(EXTENDED_SCHEMA, project.project_data, Translator())
    numbers = [section["number"] for section in sections]
    assert numbers == [1, 2, 4, 6]
    details = dict(sections[2]["items"])
    assert details["Product Categories"] == "Books, Home"
    assert details["Shipping required"] == "✓"


def test_milestones_follow_progress(project: Project) -> None:
    done = [flag for _, flag in milestones(project)]
    assert done == [True, True, True, False, False]


def test_generate_html_brief(tmp_path: Path, project: Project) -> None:
    output = tmp_path / "brief.html"
    generate_brief_html(
        project=project,
        output_path=output,
        pricing=PricingConfig(),
        generated_at="2025-01-02 10:00 UTC",
    )
    html = output.read_text(encoding="utf-8")
    assert "Acme &lt;Store&gt;" in html
    assert "In Progress (55%)" in html
    assert "1250 USD" in html
    assert 'dir="ltr"' in html


def test_generate_html_brief_rtl(tmp_path: Path, project: Project) -> None:
    output = tmp_path / "brief.html"
    generate_brief_html(project=project, output_path=output, translator=Translator("ar"))
    assert 'dir="rtl"' in output.read_text(encoding="utf-8")


def test_generate_docx_brief(tmp_path: Path, project: Project) -> None:
    output = tmp_path / "brief.docx"
    generate_brief_docx(project=project, output_path=output, pricing=PricingConfig())
    document = Document(output)
    headings = [p.text for p in document.paragraphs if p.style.name.startswith("Heading")]
    assert headings[0] == "Acme <Store>"
    assert "Milestones" in headings
    assert "Estimate" in headings
    assert any(p.text == "Total: 1250 USD" for p in document.paragraphs)


@pytest.fixture()
def payments() -> list:
    return [
        ProjectPayment(id="pay1", project_id="p1", amount=625, payment_type="initial", status="paid"),
        ProjectPayment(id="pay2", project_id="p1", amount=312.5, payment_type="milestone", status="pending"),
        ProjectPayment(id="pay3", project_id="p1", amount=100, payment_type="bonus", status="overdue"),
    ]


def test_html_brief_lists_payments_and_addons(tmp_path: Path, project: Project, payments: list) -> None:
    addons = [
        ProjectAddon(id="a2", project_id="p1", addon_key="hosting", status="pending"),
        ProjectAddon(id="a1", project_id="p1", addon_key="seo", status="active"),
    ]
    output = tmp_path / "brief.html"
    generate_brief_html(
        project=project,
        output_path=output,
        pricing=PricingConfig(),
        payments=payments,
        addons=addons,
        generated_at="2025-01-02 10:00 UTC",
    )
    html = output.read_text(encoding="utf-8")
    assert "<h2>Payments</h2>" in html
    assert "625 USD" in html
    assert "312.50 USD" in html
    assert "50%" in html
    assert "Milestone payment" in html
    assert "Overdue" in html
    assert "<td>Payment</td>" in html
    assert "<h2>Add-ons</h2>" in html
    assert "Awaiting activation" in html
    assert html.index("Hosting") < html.index("Seo")


def test_html_brief_without_payments_has_no_payment_section(tmp_path: Path, project: Project) -> None:
    output = tmp_path / "brief.html"
    generate_brief_html(project=project, output_path=output, pricing=PricingConfig())
    html = output.read_text(encoding="utf-8")
    assert "<h2>Payments</h2>" not in html
    assert "<h2>Add-ons</h2>" not in html


def test_docx_brief_payment_summary(tmp_path: Path, project: Project, payments: list) -> None:
    output = tmp_path / "brief.docx"
    generate_brief_docx(project=project, output_path=output, pricing=PricingConfig(), payments=payments)
    document = Document(output)
    headings = [p.text for p in document.paragraphs if p.style.name.startswith("Heading")]
    assert "Payments" in headings
    texts = [p.text for p in document.paragraphs]
    assert "Paid: 625 USD" in texts
    assert "Payment progress: 50%" in texts
