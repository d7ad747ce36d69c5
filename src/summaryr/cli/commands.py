"""CLI commands for summaryr.

Commands:
- init-db: Create the SQLite schema
- serve: Run the Web API with uvicorn
- process-document: Extract and chunk an uploaded document
- transcribe-video: Transcribe a registered video
- due: List flashcards due for review
- detect-format: Identify an audio file by its magic bytes
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from summaryr.config.app_config import load_app_config
from summaryr.core.audio_format import sniff_audio_format
from summaryr.core.document_processor import DocumentProcessingError, process_document
from summaryr.core.srs import get_due_flashcards
from summaryr.core.transcriber import TranscriptionError, transcribe_video
from summaryr.db.database import get_db_path, init_db

app = typer.Typer(
    name="summaryr",
    help="Transcribe videos, process documents and study with flashcards and quizzes.",
    no_args_is_help=True,
)

console = Console()


def _truncate(text: str, max_len: int) -> str:
    return text if len(text) <= max_len else text[: max_len - 1] + "…"


@app.command(name="init-db")
def init_database(
    db_path: str | None = typer.Option(None, "--db", help="Database file (config path if omitted)"),
) -> None:
    """Create the database schema."""
    init_db(Path(db_path) if db_path else None)
    console.print(f"[green]✓ Database ready[/green] [dim]{get_db_path()}[/dim]")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API."""
    import uvicorn

    console.print(f"[bold]summaryr API[/bold] on http://{host}:{port}")
    uvicorn.run("summaryr.web.api:app", host=host, port=port, reload=reload)


@app.command(name="process-document")
def process_document_cmd(
    document_id: str = typer.Argument(..., help="Document ID"),
) -> None:
    """Extract, chunk and detect the language of an uploaded document."""
    init_db()
    try:
        result = process_document(document_id)
    except DocumentProcessingError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Document processed[/green] {result.document_id}")
    console.print(f"  [dim]chars:[/dim]    {result.text_length}")
    console.print(f"  [dim]chunks:[/dim]   {result.chunks_count}")
    console.print(f"  [dim]pages:[/dim]    {result.page_count}")
    console.print(f"  [dim]language:[/dim] {result.language}")


@app.command(name="transcribe-video")
def transcribe_video_cmd(
    video_id: str = typer.Argument(..., help="Video ID"),
) -> None:
    """Transcribe an uploaded file with Whisper or fetch YouTube captions."""
    init_db()
    try:
        result = transcribe_video(video_id)
    except TranscriptionError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Video transcribed[/green] {result.video_id}")
    console.print(f"  [dim]segments:[/dim] {result.segments_count}")
    console.print(f"  [dim]source:[/dim]   {result.source}")
    if result.duration:
        console.print(f"  [dim]duration:[/dim] {result.duration:.1f}s")


@app.command()
def due(
    user_id: str = typer.Argument(..., help="User ID"),
) -> None:
    """List flashcards due for review today."""
    init_db()
    cards = get_due_flashcards(user_id)

    if not cards:
        console.print("[green]Nothing due. ✓[/green]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Front", style="cyan", width=50)
    table.add_column("Due", justify="center", width=12)
    table.add_column("Interval", justify="right", width=8)
    table.add_column("Ease", justify="right", width=6)

    for card in cards:
        table.add_row(
            _truncate(card.front, 50),
            (card.next_review_date or "new")[:10],
            str(card.interval),
            f"{card.ease_factor:.2f}",
        )

    console.print(table)
    console.print(f"\n[dim]{len(cards)} card(s) due[/dim]")


@app.command(name="detect-format")
def detect_format(
    file: str = typer.Argument(..., help="Audio or video file"),
) -> None:
    """Identify an audio container by its magic bytes."""
    path = Path(file).expanduser()
    if not path.exists():
        console.print(f"[red]✗ File not found: {path}[/red]")
        raise typer.Exit(code=1)

    with open(path, "rb") as f:
        header = f.read(16)

    audio_format = sniff_audio_format(header)
    if audio_format is None:
        console.print("[yellow]⚠ Unknown format[/yellow]")
        raise typer.Exit(code=1)

    min_bytes = load_app_config().transcription.min_chunk_bytes
    console.print(f"[green]✓ {audio_format.name}[/green] [dim]{audio_format.mime_type}[/dim]")
    if path.stat().st_size < min_bytes:
        console.print(f"  [dim]below realtime chunk minimum ({min_bytes} bytes)[/dim]")


if __name__ == "__main__":
    app()
