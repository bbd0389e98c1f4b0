"""Typer-based CLI for site intake."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .answers import InvalidFieldValue
from .config import Config, ConfigError, default_config, load_config, save_config
from .i18n import Translator, translator_for
from .models import Project, ProjectMessage, ProjectType, SenderType
from .notify import ConsoleNotifier
from .reporting import generate_brief_docx, generate_brief_html, summarize_answers
from .schema import FieldKind, FieldSpec, available_schemas, get_schema
from .store import ProjectStore, StoreError, build_store
from .wizard import IntakeWizard

app = typer.Typer(help="Collect website project requirements and manage submitted projects.")
console = Console()


def _configure_logging(level: str, log_file: Path | None) -> None:
    logger.remove()
    logger.add(lambda message: console.print(message, end="", markup=False, highlight=False), level=level)
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, level=level)


def _load(config_path: Optional[Path], log_level: Optional[str]) -> Config:
    try:
        config = load_config(config_path) if config_path else default_config()
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=4)
    _configure_logging((log_level or config.logging.level).upper(), config.logging.file)
    return config


def _translator(config: Config, language: Optional[str]) -> Translator:
    try:
        return translator_for(config.locale, language)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=4)


def _client_id(config: Config, client_id: Optional[str]) -> str:
    resolved = client_id or config.client_id
    if not resolved:
        console.print("[red]A client id is required (--client-id or 'client_id' in config).[/red]")
        raise typer.Exit(code=2)
    return resolved


def _run(coro):
    try:
        return asyncio.run(coro)
    except StoreError as exc:
        console.print(f"[red]Store error:[/red] {exc}")
        raise typer.Exit(code=3)


def _prompt_field(wizard: IntakeWizard, spec: FieldSpec, translator: Translator) -> None:
    label = translator.field(spec.path)
    current = wizard.value(spec.path)
    if spec.kind == FieldKind.BOOLEAN:
        wizard.set_field(spec.path, typer.confirm(label, default=bool(current)))
        return
    if spec.kind in (FieldKind.CHOICE, FieldKind.MULTI):
        choices = ", ".join(spec.options)
        console.print(f"[dim]{label}: {choices}[/dim]")
    if spec.kind == FieldKind.MULTI:
        raw = typer.prompt(f"{label} (comma separated)", default=",".join(current))
        wanted = [item.strip() for item in raw.split(",") if item.strip()]
        for item in list(current):
            if item not in wanted:
                wizard.toggle(spec.path, item)
        for item in wanted:
            if item in wizard.value(spec.path):
                continue
            try:
                wizard.toggle(spec.path, item)
            except InvalidFieldValue as exc:
                console.print(f"[yellow]{exc}[/yellow]")
        return
    raw = typer.prompt(label, default=current, show_default=bool(current))
    try:
        wizard.set_field(spec.path, raw.strip())
    except InvalidFieldValue as exc:
        console.print(f"[yellow]{exc}[/yellow]")


def _print_summary(wizard: IntakeWizard, translator: Translator) -> None:
    for section in summarize_answers(wizard.schema, wizard.answers, translator):
        table = Table(title=f"{section['number']}. {section['title']}", show_header=False)
        for label, value in section["items"]:
            table.add_row(label, value)
        console.print(table)
    result = wizard.validate()
    for message in result.errors:
        console.print(f"[red]ERROR:[/red] {message.text}")
    for message in result.warnings:
        console.print(f"[yellow]WARNING:[/yellow] {message.text}")


@app.command()
def new(
    config: Optional[Path] = typer.Option(None, "--config", help="Path to configuration YAML"),
    client_id: Optional[str] = typer.Option(None, "--client-id", help="Client the project belongs to"),
    language: Optional[str] = typer.Option(None, "--language", help="Label language (en, ar)"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
) -> None:
    """Run the intake wizard interactively."""

    cfg = _load(config, log_level)
    owner = _client_id(cfg, client_id)
    translator = _translator(cfg, language)
    store = build_store(cfg.store)
    wizard = IntakeWizard.from_config(
        cfg,
        store,
        client_id=owner,
        notifier=ConsoleNotifier(console),
        translator=translator,
    )

    while True:
        step = wizard.schema.step(wizard.current_step)
        console.rule(f"{wizard.current_step}/{wizard.total_steps} {translator(step.title)}")
        for spec in wizard.visible_fields():
            _prompt_field(wizard, spec, translator)

        if wizard.is_last_step:
            _print_summary(wizard, translator)
            action = typer.prompt("[s]ubmit, [b]ack, [c]ancel", default="s").strip().lower()[:1]
        else:
            action = typer.prompt("[n]ext, [b]ack, [c]ancel", default="n").strip().lower()[:1]

        if action == "n":
            wizard.next_step()
        elif action == "b":
            wizard.previous_step()
        elif action == "c":
            wizard.cancel()
            console.print("Intake cancelled.")
            raise typer.Exit(code=1)
        elif action == "s" and wizard.is_last_step:
            if not wizard.can_submit:
                console.print(f"[red]{translator('wizard.missing')}[/red]")
                continue
            project = asyncio.run(wizard.submit())
            if project is not None:
                console.print(f"[green]Project {project.id} created.[/green]")
                return
        else:
            console.print(f"[yellow]Unknown action '{action}'[/yellow]")


def _projects_table(projects: List[Project], translator: Translator) -> Table:
    table = Table(title="Projects")
    for column in ("ID", "Name", "Goal", "Status", "Progress", "Created"):
        table.add_column(column)
    for project in projects:
        table.add_row(
            project.id,
            project.name,
            translator.option(project.goal) if project.goal else "",
            translator(f"status.{project.status.value}"),
            f"{project.progress}%",
            project.created_at or "",
        )
    return table


@app.command("list")
def list_command(
    config: Optional[Path] = typer.Option(None, "--config", help="Path to configuration YAML"),
    client_id: Optional[str] = typer.Option(None, "--client-id"),
    language: Optional[str] = typer.Option(None, "--language"),
) -> None:
    """List the projects stored for a client."""

    cfg = _load(config, None)
    owner = _client_id(cfg, client_id)
    store: ProjectStore = build_store(cfg.store)
    projects = _run(store.list_projects(owner))
    if not projects:
        console.print("No projects yet.")
        return
    console.print(_projects_table(projects, _translator(cfg, language)))


@app.command()
def brief(
    project_id: str = typer.Argument(..., help="Stored project id"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to configuration YAML"),
    out: Path = typer.Option(Path("dist"), "--out", help="Output directory"),
    fmt: str = typer.Option("html", "--format", help="html or docx"),
    language: Optional[str] = typer.Option(None, "--language"),
) -> None:
    """Export a project brief."""

    cfg = _load(config, None)
    fmt = fmt.lower()
    if fmt not in ("html", "docx"):
        console.print(f"[red]Unsupported format '{fmt}'[/red]")
        raise typer.Exit(code=2)
    store = build_store(cfg.store)
    project = _run(store.get_project(project_id))
    payments = _run(store.list_payments(project.id))
    addons = _run(store.list_addons(project.id))
    out.mkdir(parents=True, exist_ok=True)
    output_path = out / f"{project.id}_brief.{fmt}"
    translator = _translator(cfg, language)
    if fmt == "html":
        template = Path(cfg.templates.brief_html) if cfg.templates.brief_html else None
        generate_brief_html(
            project=project,
            output_path=output_path,
            translator=translator,
            pricing=cfg.pricing,
            payments=payments,
            addons=addons,
            template_path=template,
        )
    else:
        template = Path(cfg.templates.brief_docx) if cfg.templates.brief_docx else None
        generate_brief_docx(
            project=project,
            output_path=output_path,
            translator=translator,
            pricing=cfg.pricing,
            payments=payments,
            addons=addons,
            template_path=template,
        )
    console.print(f"[green]Brief written to {output_path}[/green]")


def _messages_table(feed: List[ProjectMessage], translator: Translator) -> Table:
    table = Table(title="Messages")
    for column in ("When", "From", "Message"):
        table.add_column(column)
    for entry in feed:
        role = translator(f"messages.{entry.sender_type.value}")
        sender = f"{entry.sender} ({role})" if entry.sender and entry.sender != role else role
        style = "cyan" if entry.sender_type == SenderType.ADMIN else None
        table.add_row(entry.created_at or "", sender, entry.message, style=style)
    return table


@app.command()
def messages(
    project_id: str = typer.Argument(..., help="Stored project id"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to configuration YAML"),
    send: Optional[str] = typer.Option(None, "--send", help="Post a message before showing the feed"),
    sender: Optional[str] = typer.Option(None, "--sender", help="Name shown next to the posted message"),
    language: Optional[str] = typer.Option(None, "--language"),
) -> None:
    """Show a project's message feed, oldest first."""

    cfg = _load(config, None)
    translator = _translator(cfg, language)
    if send is not None and not send.strip():
        console.print("[red]Message text is empty.[/red]")
        raise typer.Exit(code=2)
    store = build_store(cfg.store)
    project = _run(store.get_project(project_id))
    if send is not None:
        _run(store.send_message(project.id, send, sender=sender or translator("messages.client")))
        console.print(f"[green]{translator('messages.sent')}[/green]")
    feed = _run(store.list_messages(project.id))
    if not feed:
        console.print(translator("messages.empty"))
        return
    console.print(_messages_table(feed, translator))


@app.command()
def steps(
    schema: str = typer.Option("extended", "--schema", help=f"One of {', '.join(available_schemas())}"),
    project_type: Optional[str] = typer.Option(None, "--project-type", help="Show the details step for this type"),
) -> None:
    """Print the steps and fields of a wizard schema."""

    try:
        wizard_schema = get_schema(schema)
    except KeyError as exc:
        console.print(f"[red]{exc.args[0]}[/red]")
        raise typer.Exit(code=2)
    selected = ProjectType.parse(project_type) if project_type else None
    if project_type and selected is None:
        console.print(f"[red]Unknown project type '{project_type}'[/red]")
        raise typer.Exit(code=2)

    translator = Translator()
    table = Table(title=f"{wizard_schema.name} ({wizard_schema.total_steps} steps)")
    for column in ("Step", "Title", "Field", "Kind", "Required"):
        table.add_column(column)
    for step in wizard_schema.steps:
        fields = wizard_schema.visible_fields(step.number, selected)
        title = translator(step.title)
        if not fields:
            table.add_row(str(step.number), title, "-", "", "")
        for spec in fields:
            table.add_row(str(step.number), title, spec.path, spec.kind.value, "yes" if spec.required else "")
    console.print(table)


@app.command("init-config")
def init_config(path: Path = typer.Argument(..., writable=True, resolve_path=True)) -> None:
    """Write an example configuration file to PATH."""

    config = default_config()
    config.client_id = "client-0001"
    config.store.path = path.parent / "projects.yaml"
    save_config(config, path)
    console.print(f"[green]Wrote configuration to {path}[/green]")


if __name__ == "__main__":
    app()
