"""CLI interface for dayorg."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from pathlib import Path
from typing import TypeVar

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from dayorg import __version__
from dayorg.client import StoreResult, TaskStoreClient
from dayorg.config import CONFIG_FILE, DayorgConfig
from dayorg.logging_setup import setup_logging
from dayorg.planner import Planner
from dayorg.render import render_calendar, render_list
from dayorg.session import SubmitOutcome

console = Console()

T = TypeVar("T")


def _open_client(config: DayorgConfig) -> TaskStoreClient:
    """Create the store client for a command."""
    return TaskStoreClient(config.store)


def _with_planner(config: DayorgConfig, action: Callable[[Planner], Awaitable[T]]) -> T:
    """Run an async action against a freshly loaded planner."""

    async def runner() -> T:
        async with _open_client(config) as client:
            planner = Planner(client, config)
            await planner.load()
            return await action(planner)

    return asyncio.run(runner())


def _report_submit(ctx: click.Context, outcome: SubmitOutcome, verb: str) -> None:
    if outcome.status == "invalid":
        console.print("[red]Task not saved:[/red]")
        for issue in outcome.issues:
            console.print(f"  • [yellow]{issue.field}[/yellow]: {escape(issue.message)}")
        ctx.exit(1)
    if outcome.status != "saved":
        _report_store_failure(ctx, outcome.result, f"Could not {verb} task")
    console.print(f"[green]Task {verb}d.[/green]")


def _report_store_failure(ctx: click.Context, result: StoreResult | None, headline: str) -> None:
    detail = ""
    if result is not None:
        if result.failure == "transport":
            detail = f" (store unreachable: {escape(result.message)})"
        elif result.status_code is not None:
            detail = f" (store answered {result.status_code}: {escape(result.message)})"
    console.print(f"[red]{headline}[/red]{detail}")
    ctx.exit(1)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="dayorg")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: .dayorg/config.json)",
)
@click.option("--base-url", default=None, help="Task store URL, overrides config")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, base_url: str | None) -> None:
    """dayorg - Manage your daily flow.

    Keep a list of prioritized, time-boxed tasks in sync with a task store
    and see them as a list or a weekly calendar.

    \b
    Examples:
      dayorg list
      dayorg calendar
      dayorg add "Study" -p 5 --start 2024-01-01T09:00 --end 2024-01-01T10:00
    """
    ctx.ensure_object(dict)
    config = DayorgConfig.load(config_path)
    if base_url:
        config.store.base_url = base_url
    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    setup_logging(config.logging.level, config.logging.file)


@main.command("list")
@click.pass_context
def list_command(ctx: click.Context) -> None:
    """Show tasks, highest priority first."""
    config: DayorgConfig = ctx.obj["config"]

    async def show(planner: Planner) -> None:
        console.print(render_list(planner.list_view()))

    _with_planner(config, show)


@main.command("calendar")
@click.option(
    "--date",
    "on_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Show the week containing this date (default: today)",
)
@click.pass_context
def calendar_command(ctx: click.Context, on_date: datetime | None) -> None:
    """Show the current week as a calendar grid."""
    config: DayorgConfig = ctx.obj["config"]
    today = on_date.date() if on_date else date.today()

    async def show(planner: Planner) -> None:
        console.print(render_calendar(planner.calendar_view(today)))

    _with_planner(config, show)


@main.command("add")
@click.argument("title")
@click.option("--description", "-d", default="", help="Short description")
@click.option("--priority", "-p", type=int, default=3, help="Priority 1 (lowest) to 5 (highest)")
@click.option("--start", "-s", default="", help="Start, e.g. 2024-01-01T09:00")
@click.option("--end", "-e", default="", help="End, e.g. 2024-01-01T10:00")
@click.pass_context
def add_command(
    ctx: click.Context,
    title: str,
    description: str,
    priority: int,
    start: str,
    end: str,
) -> None:
    """Add a task."""
    config: DayorgConfig = ctx.obj["config"]

    async def add(planner: Planner) -> SubmitOutcome:
        planner.start_create()
        planner.session.update_draft(
            title=title,
            description=description,
            priority=priority,
            start=start,
            end=end,
        )
        return await planner.submit()

    _report_submit(ctx, _with_planner(config, add), "create")


@main.command("edit")
@click.argument("task_id")
@click.option("--title", "-t", default=None, help="New title")
@click.option("--description", "-d", default=None, help="New description")
@click.option("--priority", "-p", type=int, default=None, help="New priority (1-5)")
@click.option("--start", "-s", default=None, help="New start")
@click.option("--end", "-e", default=None, help="New end")
@click.pass_context
def edit_command(
    ctx: click.Context,
    task_id: str,
    title: str | None,
    description: str | None,
    priority: int | None,
    start: str | None,
    end: str | None,
) -> None:
    """Edit a task. Unspecified fields keep their current value."""
    config: DayorgConfig = ctx.obj["config"]
    changes = {
        name: value
        for name, value in {
            "title": title,
            "description": description,
            "priority": priority,
            "start": start,
            "end": end,
        }.items()
        if value is not None
    }

    async def edit(planner: Planner) -> SubmitOutcome | None:
        if not planner.start_edit(task_id):
            return None
        planner.session.update_draft(**changes)
        return await planner.submit()

    outcome = _with_planner(config, edit)
    if outcome is None:
        console.print(f"[red]Task not found:[/red] {escape(task_id)}")
        ctx.exit(1)
    _report_submit(ctx, outcome, "update")


@main.command("delete")
@click.argument("task_id")
@click.pass_context
def delete_command(ctx: click.Context, task_id: str) -> None:
    """Delete a task by ID."""
    config: DayorgConfig = ctx.obj["config"]

    async def delete(planner: Planner) -> StoreResult:
        return await planner.delete(task_id)

    result = _with_planner(config, delete)
    if not result.ok:
        _report_store_failure(ctx, result, "Could not delete task")
    console.print(f"[green]Deleted task:[/green] {escape(task_id)}")


@main.group("config")
def config_group() -> None:
    """Inspect and create configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the effective configuration."""
    config: DayorgConfig = ctx.obj["config"]

    table = Table(title="Configuration", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Store URL", escape(config.store.base_url))
    table.add_row("Tasks path", escape(config.store.tasks_path))
    table.add_row("Timeout", f"{config.store.timeout_seconds} seconds")
    table.add_row("Default view", config.view.default_mode)
    guard_icon = "[green]✓[/green]" if config.editing.guard_double_submit else "[dim]✗[/dim]"
    table.add_row("Guard double submit", guard_icon)
    table.add_row("Log level", escape(config.logging.level))
    log_file = escape(config.logging.file) if config.logging.file else "[dim]none[/dim]"
    table.add_row("Log file", log_file)

    console.print(table)


@config_group.command("init")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing config")
@click.pass_context
def config_init(ctx: click.Context, force: bool) -> None:
    """Write the current configuration to disk."""
    config: DayorgConfig = ctx.obj["config"]
    path: Path = ctx.obj["config_path"] or CONFIG_FILE

    if path.exists() and not force:
        console.print(f"[yellow]Config already exists:[/yellow] {escape(str(path))}")
        console.print("Use [cyan]--force[/cyan] to overwrite.")
        return

    config.save(path)
    console.print(
        Panel.fit(
            "[green]Configuration saved![/green]\n\n"
            f"Config: [cyan]{escape(str(path))}[/cyan]\n\n"
            "Next steps:\n"
            "  1. Point it at your store: edit [cyan]store.base_url[/cyan]\n"
            "  2. List tasks: [cyan]dayorg list[/cyan]",
            title="dayorg",
        )
    )
