"""CLI entry point: TUI launcher plus videos, send, show, setup, config subcommands."""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vidnote import __version__
from vidnote.config import CONFIG_PATH, init_config_if_missing, load_config
from vidnote.errors import SourceUnavailableError, ValidationError
from vidnote.logging_setup import setup_logging
from vidnote.notes import AnalysisMode, format_timestamp

console = Console(highlight=False)

MODE_CHOICES = [m.value for m in AnalysisMode]


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _get_command_name(ctx: click.Context | None = None) -> str:
    """Get the command name/alias from config or Click context.

    Priority: config command_alias > ctx.info_name > "vidnote"
    """
    cfg = load_config()
    alias = cfg.get("command_alias")
    if alias:
        return alias
    if ctx and ctx.info_name:
        return ctx.info_name
    return "vidnote"


def _resolve_mode(mode: str | None) -> AnalysisMode:
    """Priority: --mode > config default_mode > full."""
    if mode:
        return AnalysisMode.parse(mode)
    try:
        return AnalysisMode.parse(load_config().get("default_mode"))
    except ValueError:
        return AnalysisMode.FULL


def get_help_text(prog_name: str = "vidnote") -> str:
    """Return the top-level --help text with *prog_name* as the command name."""
    with click.Context(main, info_name=prog_name) as ctx:
        return main.get_help(ctx)


# ---------------------------------------------------------------------------
# Main command group
# ---------------------------------------------------------------------------

@click.group(invoke_without_command=True)
@click.option("-u", "--url", default=None, help="Open the TUI straight on this video URL.")
@click.option(
    "-m", "--mode",
    type=click.Choice(MODE_CHOICES, case_sensitive=False),
    default=None,
    help="Analysis mode: body (muted), linguistic (no picture), full.",
)
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging.")
@click.version_option(__version__, prog_name="vidnote")
@click.pass_context
def main(ctx: click.Context, url: str | None, mode: str | None, debug: bool) -> None:
    """vidnote: mark moments in a video, annotate them, export the timeline.

    Without a subcommand, opens the TUI.
    """
    setup_logging(debug=debug)
    ctx.ensure_object(dict)
    ctx.obj["mode"] = mode

    if ctx.invoked_subcommand is not None:
        return

    from vidnote.app import VidnoteApp

    app = VidnoteApp(mode=_resolve_mode(mode), url=url)
    app.run()


# ---------------------------------------------------------------------------
# videos subcommand
# ---------------------------------------------------------------------------

@main.command()
@click.option("--url", default=None, help="Look up a single video URL instead of the configured channels.")
def videos(url: str | None) -> None:
    """List videos from the configured channels, feeds, and ids."""
    from vidnote.sources import default_providers, fetch_videos, request_from_config

    cfg = load_config()
    with console.status("  Fetching videos..."):
        try:
            found = fetch_videos(request_from_config(cfg, url=url), default_providers(cfg))
        except SourceUnavailableError as exc:
            console.print(f"  [red bold]Error:[/red bold] {exc}")
            sys.exit(1)

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Published", style="dim")
    table.add_column("Id")
    table.add_column("Title")
    table.add_column("Source", style="dim")
    for video in found:
        published = video.published_at.strftime("%Y-%m-%d") if video.published_at else ""
        table.add_row(published, video.id, escape(video.title), video.source.value)
    console.print(table)


# ---------------------------------------------------------------------------
# show / send subcommands
# ---------------------------------------------------------------------------

def _load_saved(path: str):
    from vidnote.output import load_notes

    try:
        return load_notes(path)
    except ValueError as exc:
        console.print(f"  [red bold]Error:[/red bold] {exc}")
        sys.exit(1)


@main.command()
@click.argument("notes_file", type=click.Path(exists=True, dir_okay=False))
def show(notes_file: str) -> None:
    """Print a saved notes file as a timeline."""
    video, mode, notes = _load_saved(notes_file)
    console.print(f"  [bold]{escape(video.title)}[/bold]  [dim]{video.url or video.watch_url}[/dim]")
    console.print(f"  Mode: {mode.label}  |  {len(notes)} notes")
    console.print()
    for note in notes:
        console.print(f"  [bold]{format_timestamp(note.timestamp):>6}[/bold]  [dim]{note.mode.value:<10}[/dim] {escape(note.text)}")


@main.command()
@click.argument("notes_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--webhook", default=None, help="Webhook URL (overrides config).")
def send(notes_file: str, webhook: str | None) -> None:
    """Export a saved notes file to the webhook."""
    from vidnote.export import export_notes, transport_from_config

    video, mode, notes = _load_saved(notes_file)
    cfg = load_config()
    if webhook:
        cfg["webhook_url"] = webhook

    try:
        transport = transport_from_config(cfg)
        with console.status(f"  Sending [bold]{len(notes)}[/bold] notes..."):
            ok = export_notes(video, mode, notes, transport)
    except ValidationError as exc:
        console.print(f"  [red bold]Error:[/red bold] {exc}")
        sys.exit(1)

    if ok:
        console.print(f"  [green]Exported[/green]      {len(notes)} notes for {escape(video.title)}")
    else:
        console.print("  [red bold]Export failed.[/red bold] Check the webhook configuration and the log.")
        sys.exit(1)


# ---------------------------------------------------------------------------
# setup subcommand
# ---------------------------------------------------------------------------

@main.command()
def setup() -> None:
    """Check dependencies and create the config file."""
    from vidnote.platform_setup import run_all_checks

    created = init_config_if_missing()
    if created:
        console.print(f"  Created default config at [dim]{CONFIG_PATH}[/dim]")
    else:
        console.print(f"  Config already exists at [dim]{CONFIG_PATH}[/dim]")

    console.print()
    all_ok = True
    for name, ok, msg in run_all_checks(load_config()):
        icon = "[green]OK[/green]" if ok else "[red]MISSING[/red]"
        console.print(f"  [{icon}] {name}: {msg}")
        if not ok:
            all_ok = False

    console.print()
    if all_ok:
        console.print("  [green]All checks passed.[/green]")
    else:
        console.print("  [yellow]Some checks failed.[/yellow] See above for what to configure.")


# ---------------------------------------------------------------------------
# config subcommand
# ---------------------------------------------------------------------------

@main.command()
@click.option("--show", is_flag=True, help="Show current config values.")
@click.pass_context
def config(ctx: click.Context, show: bool) -> None:
    """Show or edit configuration."""
    if show:
        cfg = load_config()
        for key, val in cfg.items():
            if key == "youtube_api_key" and val:
                val = "****"
            console.print(f"  [bold]{key}:[/bold] {val}")
    else:
        console.print(f"  Config file: [dim]{CONFIG_PATH}[/dim]")
        cmd_name = _get_command_name(ctx)
        console.print(
            f"  Edit it directly, or use [bold]'{cmd_name} config --show'[/bold] to view current values."
        )
