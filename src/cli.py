"""CLI interface for scatterbrain."""

import asyncio
import json
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import Annotated, Any, Optional, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from scatterbrain.config import ScatterbrainConfig, load_config, merge_cli_overrides
from scatterbrain.entries.source import JsonEntrySource
from scatterbrain.errors import ScatterbrainError
from scatterbrain.insights.models import ActionKind, InsightFilters, StoredInsight
from scatterbrain.intelligence.backend import ClaudeBackend
from scatterbrain.intelligence.tiers import TIER_DISPLAY_NAMES, progression_status
from scatterbrain.service import Scatterbrain

T = TypeVar("T")

app = typer.Typer(
    name="scatterbrain",
    help="Capture thoughts and get analysis that adapts as you write more.",
)
insights_app = typer.Typer(help="Browse and manage saved insights.")
app.add_typer(insights_app, name="insights")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from scatterbrain import __version__

        console.print(f"scatterbrain {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a scatterbrain TOML config file."),
    ] = None,
    data_dir: Annotated[
        Optional[str],
        typer.Option("--data-dir", help="Directory holding entries, profiles and insights."),
    ] = None,
    user: Annotated[
        Optional[str],
        typer.Option("--user", "-u", help="User id to operate on."),
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option("--model", "-m", help="Claude model (sonnet, haiku, opus or a full id)."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show debug logging."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Scatterbrain - adaptive personalization for your thoughts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    config = load_config(config_path)
    ctx.obj = merge_cli_overrides(config, data_dir=data_dir, user=user, model=model)


# ── Helpers ──────────────────────────────────────────────────────


def _session(ctx: typer.Context) -> Scatterbrain:
    config: ScatterbrainConfig = ctx.obj
    entries = JsonEntrySource(config.storage.path)
    backend = ClaudeBackend(model=config.generation.model, timeout=config.generation.timeout)
    return Scatterbrain(config, entries, backend)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning scatterbrain errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except ScatterbrainError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)


def _render_insights(records: list[StoredInsight]) -> None:
    if not records:
        console.print("[yellow]No insights found.[/yellow]")
        return
    table = Table(title=f"Insights ({len(records)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Created")
    table.add_column("Themes")
    table.add_column("Text")
    table.add_column("", justify="center")
    for record in records:
        text = record.source_text.replace("\n", " ")
        if len(text) > 60:
            text = text[:60] + "..."
        flags = ("★" if record.starred else "") + (" archived" if record.archived else "")
        table.add_row(
            record.id,
            record.created_at.strftime("%Y-%m-%d %H:%M"),
            escape(", ".join(record.themes)),
            escape(text),
            flags,
        )
    console.print(table)


# ── Entries and profile ─────────────────────────────────────────


@app.command()
def capture(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="The thought to capture.")],
    title: Annotated[
        Optional[str],
        typer.Option("--title", "-t", help="Optional title for the entry."),
    ] = None,
) -> None:
    """Capture a new thought."""
    config: ScatterbrainConfig = ctx.obj
    entries = JsonEntrySource(config.storage.path)
    entry = _run(entries.add_entry(config.user.id, text, title=title))
    count = _run(entries.count(config.user.id))
    console.print(f"[green]Captured[/green] {entry.id}")
    console.print(progression_status(count).message)


@app.command()
def profile(
    ctx: typer.Context,
    rebuild: Annotated[
        bool,
        typer.Option("--rebuild", help="Rebuild even if no new entries were added."),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the profile as JSON."),
    ] = False,
) -> None:
    """Show the interest profile built from your entries."""
    session = _session(ctx)
    user_profile = _run(session.build_profile(force=rebuild))

    if as_json:
        console.print(user_profile.model_dump_json(indent=2), markup=False)
        return

    if not user_profile.has_interests:
        console.print("[yellow]No interests detected yet. Capture a few more thoughts.[/yellow]")
        return

    table = Table(title="Interests")
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Expertise")
    table.add_column("Keywords")
    for interest in user_profile.primary_interests:
        level = user_profile.expertise_level.get(interest.category)
        table.add_row(
            interest.category,
            str(interest.score),
            str(level) if level else "-",
            escape(", ".join(interest.matched_keywords[:6])),
        )
    console.print(table)
    console.print(f"Tone: [bold]{user_profile.dominant_tone}[/bold]")
    if user_profile.content_preferences.formats:
        console.print(f"Formats: {', '.join(user_profile.content_preferences.formats)}")
    if user_profile.content_preferences.platforms:
        console.print(f"Platforms: {', '.join(user_profile.content_preferences.platforms)}")


@app.command()
def tier(ctx: typer.Context) -> None:
    """Show the current intelligence tier and what unlocks next."""
    session = _session(ctx)
    current, count = _run(session.current_tier())
    status = progression_status(count)
    console.print(f"[bold]{TIER_DISPLAY_NAMES[current]}[/bold] ({count} thoughts)")
    console.print(f"{status.level}: {status.message}")


@app.command()
def analyze(
    ctx: typer.Context,
    entry_id: Annotated[str, typer.Argument(help="Id of the entry to analyze.")],
    save: Annotated[
        bool,
        typer.Option("--save/--no-save", help="Keep the result in the insight store."),
    ] = True,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the full insight as JSON."),
    ] = False,
) -> None:
    """Analyze an entry at your current intelligence tier."""
    session = _session(ctx)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Analyzing thought...", total=None)
        try:
            insight, insight_id = _run(session.analyze(entry_id, save=save))
        except KeyError:
            console.print(f"[red]Error:[/red] Entry not found: {entry_id}")
            raise typer.Exit(1)

    if as_json:
        console.print(json.dumps(insight.to_payload(), indent=2), markup=False)
        return

    console.print(
        f"[bold]{TIER_DISPLAY_NAMES[insight.intelligence_level]}[/bold] "
        f"(personalization {insight.personalization_score}%)"
    )
    console.print(insight.analysis.summary, markup=False)
    for item in insight.analysis.key_insights:
        console.print(f"  - {item}", markup=False)
    console.print(f"Themes: {', '.join(insight.themes)}  Mood: {insight.mood}", markup=False)
    console.print(insight.progression_status.message)
    if insight_id:
        console.print(f"[green]Saved[/green] {insight_id}")


# ── Insights ─────────────────────────────────────────────────────


@insights_app.command("list")
def insights_list(
    ctx: typer.Context,
    starred: Annotated[
        Optional[bool],
        typer.Option("--starred/--unstarred", help="Filter by starred flag."),
    ] = None,
    archived: Annotated[
        bool,
        typer.Option("--archived", help="Show archived insights instead."),
    ] = False,
    theme: Annotated[
        Optional[list[str]],
        typer.Option("--theme", help="Only insights with this theme (repeatable)."),
    ] = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", min=0, help="Maximum number of results."),
    ] = None,
) -> None:
    """List saved insights, newest first."""
    session = _session(ctx)
    filters = InsightFilters(
        starred=starred,
        archived=True if archived else None,
        themes=theme or None,
        limit=limit,
    )
    _render_insights(_run(session.query_insights(filters)))


@insights_app.command("search")
def insights_search(
    ctx: typer.Context,
    term: Annotated[str, typer.Argument(help="Text to search for.")],
) -> None:
    """Search saved insights by text, keyword or theme."""
    session = _session(ctx)
    _render_insights(_run(session.search_insights(term)))


@insights_app.command("star")
def insights_star(
    ctx: typer.Context,
    insight_id: Annotated[str, typer.Argument(help="Insight id.")],
) -> None:
    """Toggle the star on an insight."""
    session = _session(ctx)
    starred = _run(session.toggle_star(insight_id))
    console.print(f"{insight_id}: {'starred' if starred else 'unstarred'}")


@insights_app.command("archive")
def insights_archive(
    ctx: typer.Context,
    insight_id: Annotated[str, typer.Argument(help="Insight id.")],
) -> None:
    """Archive an insight."""
    session = _session(ctx)
    _run(session.archive_insight(insight_id))
    console.print(f"{insight_id}: archived")


@insights_app.command("delete")
def insights_delete(
    ctx: typer.Context,
    insight_id: Annotated[str, typer.Argument(help="Insight id.")],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation."),
    ] = False,
) -> None:
    """Permanently delete an insight."""
    if not yes:
        typer.confirm(f"Delete {insight_id}?", abort=True)
    session = _session(ctx)
    _run(session.delete_insight(insight_id))
    console.print(f"{insight_id}: deleted")


@insights_app.command("track")
def insights_track(
    ctx: typer.Context,
    insight_id: Annotated[str, typer.Argument(help="Insight id.")],
    kind: Annotated[ActionKind, typer.Argument(help="Action kind.")],
    note: Annotated[
        Optional[str],
        typer.Option("--note", help="Free-text note stored with the action."),
    ] = None,
) -> None:
    """Record a follow-up action taken on an insight."""
    session = _session(ctx)
    payload = {"note": note} if note else {}
    _run(session.track_action(insight_id, kind, payload))
    console.print(f"{insight_id}: {kind} recorded")


if __name__ == "__main__":
    app()
