"""
scribeview.cli - Typer CLI entry point.

Provides subcommands to register recordings, run the transcript pipeline,
edit and view transcripts.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from scribeview import __version__
from scribeview.config import (
    CONFIG_FILENAME,
    ScribeviewConfig,
    create_default_config,
    find_config,
    load_config,
    write_config,
)
from scribeview.exceptions import StoreError
from scribeview.logging import configure_logging
from scribeview.markup import Block, Heading, LineBreak, ListItem
from scribeview.models import Transcription
from scribeview.store import (
    DocumentStore,
    add_transcription,
    list_transcriptions,
    load_transcription,
)

app = typer.Typer(
    name="scribeview",
    help="Transcript viewer and editor.\n\n"
    "Transcribes audio, formats and titles the text, and renders the result.",
    add_completion=False,
)
console = Console()

SPAN_STYLES = {"text": "", "strong": "bold", "em": "italic"}


def version_callback(value: bool) -> None:
    if value:
        console.print(f"scribeview {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Scribeview - transcript viewer and editor."""
    configure_logging(verbose)


def load_workspace() -> tuple[ScribeviewConfig, DocumentStore]:
    """Load config and store for the current workspace or exit."""
    config_file = find_config()
    if not config_file:
        console.print("[red]Error: Not in a Scribeview workspace[/red]")
        console.print("[dim]Run 'scribeview init' first or cd into a workspace directory[/dim]")
        raise typer.Exit(1)

    try:
        config = load_config(config_file.parent)
    except ValueError as e:
        console.print(f"[red]Error: Invalid {CONFIG_FILENAME}: {e}[/red]")
        raise typer.Exit(1)

    return config, DocumentStore(config.resolve_store_path())


def get_transcription(
    config: ScribeviewConfig, store: DocumentStore, transcription_id: str
) -> Transcription:
    try:
        transcription = load_transcription(store, config.user_id, transcription_id)
    except StoreError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    if transcription is None:
        console.print("[red]You do not have access to this transcription.[/red]")
        raise typer.Exit(1)
    return transcription


def build_view(
    config: ScribeviewConfig,
    store: DocumentStore,
    transcription: Transcription,
    model: str | None = None,
    language: str | None = None,
):
    """Wire services, pipeline and view for one transcription."""
    from scribeview.pipeline import TranscriptionPipeline
    from scribeview.services import build_services
    from scribeview.view import TranscriptionView

    services = build_services(config)
    pipeline = TranscriptionPipeline(
        services.speech_to_text,
        services.formatter,
        services.title_generator,
        store=store,
        user_id=config.user_id,
    )
    return TranscriptionView(
        transcription,
        pipeline,
        store,
        config.user_id,
        model=model or config.model,
        language=language or config.language,
    )


def generate_transcription_id(existing: set[str]) -> str:
    """Generate a unique transcription ID."""
    counter = 1
    while True:
        transcription_id = f"transcription_{counter:03d}"
        if transcription_id not in existing:
            return transcription_id
        counter += 1


def print_blocks(blocks: tuple[Block, ...]) -> None:
    """Print rendered blocks to the terminal."""
    for block in blocks:
        if isinstance(block, LineBreak):
            console.print()
        elif isinstance(block, Heading):
            style = "bold underline" if block.level == 1 else "bold"
            console.print(Text(block.text, style=style))
        elif isinstance(block, ListItem):
            console.print(Text(f"  • {block.text}"))
        else:
            line = Text()
            for span in block.spans:
                line.append(span.text, style=SPAN_STYLES[span.kind])
            console.print(line)


def print_notices(view) -> None:
    colors = {"error": "red", "warning": "yellow", "success": "green"}
    for notice in view.notices:
        color = colors.get(notice.level, "white")
        console.print(f"[{color}]{notice.message}[/{color}]")


@app.command("init")
def init_workspace(
    path: str = typer.Option(".", "--path", "-d", help="Workspace directory"),
    user: str = typer.Option("local", "--user", "-u", help="User ID owning the transcriptions"),
    backend: str = typer.Option(
        "http", "--backend", "-b", help="Formatter backend: http or llm"
    ),
) -> None:
    """Create a Scribeview workspace with a config file and an empty store."""
    workspace = Path(path)
    config_path = workspace / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[red]Error: '{config_path}' already exists[/red]")
        raise typer.Exit(1)

    config = create_default_config(user, formatter_backend=backend)
    try:
        ScribeviewConfig(**config)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    write_config(config, config_path)
    DocumentStore(workspace / config["store_path"]).set(f"users/{user}/transcriptions", {})

    console.print(f"[green]✓[/green] Created workspace for user '{user}'")
    console.print(f"[dim]  {config_path}[/dim]")
    console.print("\nNext step: [cyan]scribeview add <audio_url>[/cyan]")


@app.command("add")
def add_recording(
    audio_url: str = typer.Argument(..., help="URL of the audio recording"),
    transcription_id: str | None = typer.Option(None, "--id", help="Transcription ID"),
    title: str = typer.Option("", "--title", "-t", help="Initial title"),
) -> None:
    """Register an audio recording with an empty transcript."""
    config, store = load_workspace()

    existing = {t.id for t in list_transcriptions(store, config.user_id)}
    transcription = Transcription(
        id=transcription_id or generate_transcription_id(existing),
        audio_url=audio_url,
        title=title,
        transcript="",
    )

    try:
        add_transcription(store, config.user_id, transcription)
    except StoreError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Added {transcription.id}")
    console.print(f"\nNext step: [cyan]scribeview transcribe {transcription.id}[/cyan]")


@app.command("list")
def list_recordings() -> None:
    """List the workspace user's transcriptions."""
    config, store = load_workspace()
    transcriptions = list_transcriptions(store, config.user_id)

    if not transcriptions:
        console.print("[yellow]No transcriptions found. Run 'scribeview add' first.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Transcriptions")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Status", style="yellow")

    for t in transcriptions:
        status = "[dim]Pending[/dim]" if t.needs_transcription else "[green]Transcribed[/green]"
        table.add_row(t.id, t.title or "-", status)

    console.print(table)


@app.command("transcribe")
def transcribe(
    transcription_id: str = typer.Argument(..., help="Transcription ID"),
    language: str | None = typer.Option(
        None, "--language", "-l", help="Language code or 'auto' (config default if not set)"
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="Formatting/title model"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Regenerate even if a transcript exists"
    ),
) -> None:
    """Run the transcript pipeline for one recording."""
    config, store = load_workspace()
    transcription = get_transcription(config, store, transcription_id)

    try:
        view = build_view(config, store, transcription, model=model, language=language)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    async def _go():
        result = await view.mount()
        if result is None and force and not view.denied:
            result = await view.regenerate()
        return result

    console.print(f"[cyan]Transcribing {transcription_id} with {view.model}...[/cyan]")
    result = asyncio.run(_go())
    print_notices(view)

    if view.denied or any(n.level == "error" for n in view.notices):
        raise typer.Exit(1)
    if result is None:
        console.print("[dim]Transcript already present. Use --force to regenerate.[/dim]")
        raise typer.Exit(0)
    if not result.ok:
        raise typer.Exit(1)

    if result.detected_language:
        console.print(f"[dim]  Detected language: {result.detected_language}[/dim]")
    console.print(f"[green]✓[/green] {view.title}")


@app.command("show")
def show(
    transcription_id: str = typer.Argument(..., help="Transcription ID"),
    raw: bool = typer.Option(False, "--raw", "-r", help="Print raw markup"),
) -> None:
    """Print a transcript to the terminal."""
    from scribeview.markup import render_markup

    config, store = load_workspace()
    transcription = get_transcription(config, store, transcription_id)

    console.print(Text(transcription.title or "Untitled", style="bold cyan"))
    console.print()
    if raw:
        console.print(transcription.transcript, markup=False, highlight=False)
    else:
        print_blocks(render_markup(transcription.transcript))


@app.command("edit")
def edit(
    transcription_id: str = typer.Argument(..., help="Transcription ID"),
    title: str | None = typer.Option(None, "--title", "-t", help="New title"),
    transcript_file: Path | None = typer.Option(
        None, "--transcript-file", "-f", help="File with the new transcript markup"
    ),
) -> None:
    """Manually save a new title and/or transcript."""
    if title is None and transcript_file is None:
        console.print("[yellow]Nothing to change. Pass --title and/or --transcript-file.[/yellow]")
        raise typer.Exit(0)

    config, store = load_workspace()
    transcription = get_transcription(config, store, transcription_id)

    view = build_view(config, store, transcription)

    if title is not None:
        view.set_title(title)
    if transcript_file is not None:
        if not transcript_file.exists():
            console.print(f"[red]Error: {transcript_file} not found[/red]")
            raise typer.Exit(1)
        view.select_tab("edit")
        view.edit(transcript_file.read_text(encoding="utf-8"))

    saved = view.save()
    print_notices(view)
    if not saved:
        raise typer.Exit(1)


@app.command("report")
def report(
    transcription_id: str = typer.Argument(..., help="Transcription ID"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output HTML path"),
    editing: bool = typer.Option(False, "--edit", "-e", help="Render the edit tab"),
    open_browser: bool = typer.Option(False, "--open", help="Open in browser"),
) -> None:
    """Generate an HTML page for a transcription."""
    from scribeview.reports import generate_transcription_page

    config, store = load_workspace()
    transcription = get_transcription(config, store, transcription_id)

    view = build_view(config, store, transcription)
    if editing:
        view.select_tab("edit")

    if output is None:
        base = config.config_path.parent if config.config_path else Path.cwd()
        output = base / "reports" / f"{transcription_id}.html"

    path = generate_transcription_page(view, output, open_browser=open_browser)
    console.print(f"[green]✓[/green] Report written to {path}")
