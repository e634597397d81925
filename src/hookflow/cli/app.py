"""Command-line tool for inspecting hooks and gate decisions."""

from __future__ import annotations

import asyncio
import logging

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.table import Table

from hookflow.config import Settings
from hookflow.hooks.base import HookLifecycle, HookType
from hookflow.hooks.errors import HookError
from hookflow.hooks.pipeline import load_hooks

console = Console()

HOOK_TYPES = click.Choice([t.value for t in HookType])
LIFECYCLES = click.Choice([l.value for l in HookLifecycle])


def _load_settings(ctx: click.Context) -> Settings:
    return Settings.load(ctx.obj.get("config_path"))


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """hookflow: compose workflow guidance and check tool gates."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )


@cli.command("list")
@click.option("--type", "hook_type", type=HOOK_TYPES, default=None, help="Filter by hook type")
@click.option("--lifecycle", type=LIFECYCLES, default=None, help="Filter by lifecycle phase")
@click.pass_context
def list_hooks(ctx: click.Context, hook_type: str | None, lifecycle: str | None) -> None:
    """List registered hooks."""
    registry = _load_settings(ctx).build_registry()
    hooks = [
        h
        for h in sorted(registry.all(), key=lambda h: h.priority)
        if (hook_type is None or h.type.value == hook_type)
        and (lifecycle is None or h.lifecycle.value == lifecycle)
    ]

    if not hooks:
        console.print("[dim]No matching hooks.[/dim]")
        return

    table = Table(title="Hooks")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Level")
    table.add_column("Priority", justify="right")
    table.add_column("Depends on", style="dim")
    for hook in hooks:
        table.add_row(
            hook.id,
            hook.name,
            hook.requirement_level.value,
            str(hook.priority),
            ", ".join(hook.dependencies),
        )
    console.print(table)


@cli.command()
@click.option("--type", "hook_type", type=HOOK_TYPES, default=None, help="Hook type")
@click.option("--lifecycle", type=LIFECYCLES, default=None, help="Lifecycle phase")
@click.option("--provider", default=None, help="Active provider")
@click.option("--feature", default=None, help="Active feature")
@click.option("--storage", default=None, help="Active storage backend")
@click.option("--session-id", default=None, help="Session ID for scoped hooks")
@click.option("--raw", is_flag=True, help="Print markdown source instead of rendering it")
@click.pass_context
def compose(
    ctx: click.Context,
    hook_type: str | None,
    lifecycle: str | None,
    provider: str | None,
    feature: str | None,
    storage: str | None,
    session_id: str | None,
    raw: bool,
) -> None:
    """Compose the hooks that apply to the given context."""
    settings = _load_settings(ctx)
    try:
        result = asyncio.run(
            load_hooks(
                settings.build_registry(),
                settings.build_loader(),
                settings.build_composer(),
                type=hook_type,
                lifecycle=lifecycle,
                provider=provider,
                feature=feature,
                storage=storage,
                session_id=session_id,
            )
        )
    except HookError as exc:
        console.print(f"[red]✗ {escape(str(exc))}[/red]")
        ctx.exit(1)

    if result.content:
        if raw:
            click.echo(result.content)
        else:
            console.print(Markdown(result.content))
    else:
        console.print("[dim]No hooks apply.[/dim]")

    for notice in result.composed.notices:
        console.print(f"[yellow]! {escape(notice)}[/yellow]")


@cli.command()
@click.argument("tool_name")
@click.option(
    "--completed", multiple=True, help="Hook ID to treat as completed (repeatable)"
)
@click.pass_context
def check(ctx: click.Context, tool_name: str, completed: tuple[str, ...]) -> None:
    """Check whether TOOL_NAME is allowed by the configured blocking hooks."""
    tracker = _load_settings(ctx).build_workflow_tracker()
    for hook_id in completed:
        tracker.mark_hook_completed(hook_id)

    result = tracker.check_tool_allowed(tool_name)
    if result.allowed:
        console.print(f"[green]✓ {tool_name} is allowed[/green]")
        return

    console.print(f"[red]✗ {tool_name} is blocked by {result.blocked_by}[/red]")
    console.print(f"  {escape(result.message or '')}")
    if result.hint:
        console.print(f"  [dim]{result.hint}[/dim]")
    ctx.exit(1)


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
