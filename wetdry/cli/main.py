"""
WetDry CLI entry point.

Commands:
    wetdry version   — Print the agent version
    wetdry config    — Show the resolved configuration
    wetdry compose   — Build a push payload the way the server does
    wetdry simulate  — Run install → activate → push (→ click) in memory
"""

from __future__ import annotations

import asyncio
import json
import logging

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="wetdry",
    help="WetDry — push-notification agent for the Wet & Dry ERP.",
    add_completion=False,
)

console = Console()


def _load_config(origin: str | None = None):
    from wetdry.core.config import WorkerConfig
    from wetdry.core.errors import ConfigError

    overrides = {"app": {"origin": origin}} if origin else None
    try:
        return WorkerConfig.load(overrides=overrides)
    except ConfigError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Print the agent version."""
    from wetdry import __version__

    console.print(f"wetdry {__version__}")


@app.command()
def config() -> None:
    """Show the resolved configuration (defaults, files, WETDRY_* env)."""
    cfg = _load_config()
    console.print_json(cfg.model_dump_json())


@app.command()
def compose(
    title: str = typer.Option(..., "--title", "-t", help="Notification title"),
    body: str = typer.Option(..., "--body", "-b", help="Notification body"),
    priority: str = typer.Option("medium", "--priority", "-p", help="low|medium|high|critical"),
    notification_type: str = typer.Option(None, "--type", help="Notification type, e.g. low_stock_alert"),
    entity_type: str = typer.Option(None, "--entity-type", help="Entity the notification is about"),
    entity_id: str = typer.Option(None, "--entity-id", help="Entity id"),
    tag: str = typer.Option(None, "--tag", help="De-duplication tag"),
) -> None:
    """Print the JSON payload the server would push."""
    from wetdry.notifications.payload import DEFAULT_TTL, compose_payload, urgency_for

    data = {
        k: v
        for k, v in {
            "type": notification_type,
            "entityType": entity_type,
            "entityId": entity_id,
        }.items()
        if v
    }
    payload = compose_payload(title, body, priority=priority, tag=tag, data=data)
    console.print(f"[dim]TTL: {DEFAULT_TTL}  Urgency: {urgency_for(priority)}[/dim]")
    console.print_json(json.dumps(payload))


@app.command()
def simulate(
    payload: str = typer.Argument(None, help="Push body (JSON or plain text). Omit for an empty push."),
    click: bool = typer.Option(False, "--click", "-c", help="Click the notification after showing it"),
    action: str = typer.Option("", "--action", "-a", help="Action id to click (view, dismiss, ...)"),
    window: list[str] = typer.Option([], "--window", "-w", help="URL of an open app window (repeatable)"),
    cache: list[str] = typer.Option([], "--cache", help="Existing cache store name (repeatable)"),
    origin: str = typer.Option(None, "--origin", help="App origin (overrides config)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
) -> None:
    """Simulate the agent against an in-memory host."""
    asyncio.run(_run_simulation(payload, click or bool(action), action, window, cache, origin, verbose))


async def _run_simulation(
    payload: str | None,
    click: bool,
    action: str,
    windows: list[str],
    caches: list[str],
    origin: str | None,
    verbose: bool,
) -> None:
    from wetdry.core.worker import PushWorker
    from wetdry.host.memory import create_in_memory_host
    from wetdry.middleware.logging import EventLogger, setup_logging
    from wetdry.middleware.outcomes import OutcomeTracker

    cfg = _load_config(origin)

    setup_logging(
        log_dir=cfg.get_log_dir(),
        console_level=logging.DEBUG if verbose else cfg.logging.console_level,
    )
    logger = logging.getLogger("wetdry")
    logger.info("Starting simulation")

    host = create_in_memory_host(cfg.app.origin, windows=windows, caches=caches)
    worker = PushWorker(host, cfg)
    worker.use(EventLogger(log_dir=cfg.get_log_dir(), log_events=cfg.logging.log_events).middleware)
    tracker = OutcomeTracker()
    worker.use(tracker.middleware)

    await worker.install()
    activated = await worker.activate()
    remaining = await host.caches.keys()
    console.print(
        f"[dim]Agent {worker.state.value}; caches kept: {escape(str(remaining))}; "
        f"activation outcomes: {escape(str([o.value for o in activated.outcomes]))}[/dim]"
    )

    pushed = await worker.push(payload)
    visible = await host.registration.get_notifications()
    if not visible:
        console.print(f"[red]No notification shown[/red] ({escape(str([o.value for o in pushed.outcomes]))})")
        raise typer.Exit(1)

    shown = visible[-1]
    console.print(_notification_panel(shown.title, shown.options.to_dict(), pushed.outcomes))

    if click:
        clicked = await worker.click(shown, action)
        table = Table(title=escape(f"Click (action={action or 'body'})"))
        table.add_column("Effect")
        table.add_column("Outcome")
        for effect, outcome in zip(clicked.effects, clicked.outcomes):
            table.add_row(escape(_describe_effect(effect)), outcome.value)
        console.print(table)
        for w in host.clients.windows:
            marker = "★" if w.focused else " "
            console.print(f" {marker} {escape(w.url)}")

    if tracker.failure_count:
        console.print(f"[yellow]{tracker.failure_count} step(s) failed; see log[/yellow]")


def _notification_panel(title: str, options: dict, outcomes) -> Panel:
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in options.items():
        table.add_row(key, escape(json.dumps(value)))
    table.add_row("outcomes", ", ".join(o.value for o in outcomes))
    return Panel(table, title=escape(title))


def _describe_effect(effect) -> str:
    from wetdry.core.types import CloseNotification, NavigateAndFocus, OpenWindow

    if isinstance(effect, CloseNotification):
        return f"close {effect.notification.tag}"
    if isinstance(effect, NavigateAndFocus):
        return f"navigate+focus existing window → {effect.url}"
    if isinstance(effect, OpenWindow):
        return f"open {effect.url}"
    return type(effect).__name__


if __name__ == "__main__":
    app()
