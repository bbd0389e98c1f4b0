from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from rich.console import Console
from typer.testing import CliRunner

from site_intake import cli
from site_intake.config import default_config, load_config, save_config

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch) -> None:
    monkeypatch.setattr(cli, "console", Console(width=200))


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    config = default_config()
    config.client_id = "client-1"
    config.wizard.schema_name = "classic"
    config.store.path = tmp_path / "projects.yaml"
    path = tmp_path / "site-intake.yml"
    save_config(config, path)
    return path


def _seed(store_path: Path, **tables: list) -> None:
    record = {
        "id": "p1",
        "client_id": "client-1",
        "name": "Acme Store",
        "description": "A shop",
        "goal": "ecommerce",
        "status": "review",
        "progress": 80,
        "project_data": {"name": "Acme Store", "description": "A shop", "goal": "ecommerce", "sections": ["home"]},
        "created_at": "2025-01-01T00:00:00+00:00",
    }
    store_path.write_text(yaml.safe_dump({"projects": [record], **tables}, allow_unicode=True), encoding="utf-8")


def test_init_config_writes_loadable_file(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    result = runner.invoke(cli.app, ["init-config", str(path)])
    assert result.exit_code == 0
    config = load_config(path)
    assert config.client_id == "client-0001"
    assert config.store.path == tmp_path / "projects.yaml"


def test_steps_lists_schema_fields() -> None:
    result = runner.invoke(cli.app, ["steps", "--schema", "extended", "--project-type", "ecommerce"])
    assert result.exit_code == 0
    assert "extended (12 steps)" in result.stdout
    assert "ecommerceDetails.categories" in result.stdout
    assert "portfolioDetails.profession" not in result.stdout


def test_steps_rejects_unknown_inputs() -> None:
    assert runner.invoke(cli.app, ["steps", "--schema", "nope"]).exit_code == 2
    assert runner.invoke(cli.app, ["steps", "--project-type", "castle"]).exit_code == 2


def test_list_shows_client_projects(config_path: Path) -> None:
    _seed(config_path.parent / "projects.yaml")
    result = runner.invoke(cli.app, ["list", "--config", str(config_path)])
    assert result.exit_code == 0
    assert "Acme Store" in result.stdout
    assert "Under Review" in result.stdout


def test_list_without_projects(config_path: Path) -> None:
    result = runner.invoke(cli.app, ["list", "--config", str(config_path), "--client-id", "someone-else"])
    assert result.exit_code == 0
    assert "No projects yet." in result.stdout


def test_list_requires_client_id(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    save_config(default_config(), path)
    assert runner.invoke(cli.app, ["list", "--config", str(path)]).exit_code == 2


def test_missing_config_exit_code(tmp_path: Path) -> None:
    result = runner.invoke(cli.app, ["list", "--config", str(tmp_path / "absent.yml")])
    assert result.exit_code == 4


def test_store_error_exit_code(config_path: Path) -> None:
    (config_path.parent / "projects.yaml").write_text("not: a list\n", encoding="utf-8")
    result = runner.invoke(cli.app, ["list", "--config", str(config_path)])
    assert result.exit_code == 3


def test_brief_exports_html(config_path: Path, tmp_path: Path) -> None:
    _seed(config_path.parent / "projects.yaml")
    out = tmp_path / "dist"
    result = runner.invoke(cli.app, ["brief", "p1", "--config", str(config_path), "--out", str(out)])
    assert result.exit_code == 0
    html = (out / "p1_brief.html").read_text(encoding="utf-8")
    assert "Acme Store" in html
    assert "Testing" in html


def test_brief_includes_payments_and_addons(config_path: Path, tmp_path: Path) -> None:
    _seed(
        config_path.parent / "projects.yaml",
        project_payments=[
            {"id": "pay1", "project_id": "p1", "amount": 300, "payment_type": "initial", "status": "paid"},
            {"id": "pay2", "project_id": "p1", "amount": 200, "payment_type": "final", "status": "pending"},
        ],
        project_addons=[{"id": "a1", "project_id": "p1", "addon_key": "seo", "status": "active"}],
    )
    out = tmp_path / "dist"
    result = runner.invoke(cli.app, ["brief", "p1", "--config", str(config_path), "--out", str(out)])
    assert result.exit_code == 0, result.stdout
    html = (out / "p1_brief.html").read_text(encoding="utf-8")
    assert "Payments" in html
    assert "Initial payment" in html
    assert "Awaiting payment" in html
    assert "Add-ons" in html
    assert "Seo" in html


def test_brief_unknown_project(config_path: Path, tmp_path: Path) -> None:
    _seed(config_path.parent / "projects.yaml")
    result = runner.invoke(cli.app, ["brief", "zzz", "--config", str(config_path), "--out", str(tmp_path)])
    assert result.exit_code == 3


def test_new_runs_wizard_and_stores_project(config_path: Path) -> None:
    answers = "Acme Store\nA shop\n" + "\n" * 60
    result = runner.invoke(cli.app, ["new", "--config", str(config_path)], input=answers)
    assert result.exit_code == 0, result.stdout
    records = yaml.safe_load((config_path.parent / "projects.yaml").read_text(encoding="utf-8"))["projects"]
    assert len(records) == 1
    assert records[0]["name"] == "Acme Store"
    assert records[0]["description"] == "A shop"
    assert records[0]["client_id"] == "client-1"


def test_new_cancel(config_path: Path) -> None:
    result = runner.invoke(cli.app, ["new", "--config", str(config_path)], input="Acme\n\n\nc\n")
    assert result.exit_code == 1
    assert not (config_path.parent / "projects.yaml").exists()


def test_messages_feed_and_send(config_path: Path) -> None:
    _seed(
        config_path.parent / "projects.yaml",
        project_messages=[
            {
                "id": "m1",
                "project_id": "p1",
                "sender": "Dana",
                "message": "Initial design is ready",
                "sender_type": "admin",
                "created_at": "2025-01-02T00:00:00+00:00",
            },
        ],
    )
    result = runner.invoke(
        cli.app, ["messages", "p1", "--config", str(config_path), "--send", "Looks great", "--sender", "Sam"]
    )
    assert result.exit_code == 0, result.stdout
    assert "Message sent" in result.stdout
    assert result.stdout.index("Initial design is ready") < result.stdout.index("Looks great")

    stored = yaml.safe_load((config_path.parent / "projects.yaml").read_text(encoding="utf-8"))
    assert [m["sender"] for m in stored["project_messages"]] == ["Dana", "Sam"]
    assert stored["project_messages"][1]["sender_type"] == "client"


def test_messages_rejects_blank_text(config_path: Path) -> None:
    _seed(config_path.parent / "projects.yaml")
    result = runner.invoke(cli.app, ["messages", "p1", "--config", str(config_path), "--send", "   "])
    assert result.exit_code == 2
    stored = yaml.safe_load((config_path.parent / "projects.yaml").read_text(encoding="utf-8"))
    assert "project_messages" not in stored


def test_messages_empty_and_unknown_project(config_path: Path) -> None:
    _seed(config_path.parent / "projects.yaml")
    result = runner.invoke(cli.app, ["messages", "p1", "--config", str(config_path)])
    assert result.exit_code == 0
    assert "No messages yet." in result.stdout
    assert runner.invoke(cli.app, ["messages", "zzz", "--config", str(config_path)]).exit_code == 3


def test_list_uses_locale_catalog(config_path: Path) -> None:
    catalog = config_path.parent / "labels.yml"
    catalog.write_text("status.review: Awaiting sign-off\n", encoding="utf-8")
    config = load_config(config_path)
    config.locale.catalog = catalog
    save_config(config, config_path)
    _seed(config_path.parent / "projects.yaml")

    result = runner.invoke(cli.app, ["list", "--config", str(config_path)])
    assert result.exit_code == 0
    assert "Awaiting sign-off" in result.stdout
