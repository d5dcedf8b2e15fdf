"""
Command-line interface for the OnePlace policy assistant.

Commands:
    serve   - Start the FastAPI server
    chunk   - Preview how a policy file will be chunked
    ingest  - Send a policy file to a running server
    ask     - Ask a running server a question
    version - Show version information
"""

from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="oneplace",
    help="Placement-policy assistant for the SCET OnePlace portal",
    add_completion=False,
)
console = Console()

DEFAULT_URL = "http://127.0.0.1:8000"


def _read_policy(path: Path) -> str:
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _post(url: str, payload: dict, timeout: float) -> dict:
    """POST JSON to the server and return the decoded body, exiting on errors."""
    try:
        response = httpx.post(url, json=payload, timeout=timeout)
    except httpx.HTTPError as e:
        console.print(f"[red]Request failed: {e}[/red]")
        raise typer.Exit(1)

    try:
        body = response.json()
    except ValueError:
        body = {"error": response.text}

    if response.is_error:
        console.print(f"[red]Error {response.status_code}: {body.get('error', body)}[/red]")
        raise typer.Exit(1)
    return body


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind (default from settings)"),
    port: Optional[int] = typer.Option(None, help="Port to bind (default from settings)"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """Start the FastAPI server."""
    import uvicorn

    from oneplace.config import settings

    host = host or settings.api_host
    port = port or settings.api_port

    console.print(f"[green]Starting OnePlace assistant on {host}:{port}[/green]")

    # Single worker: the policy store lives in process memory
    uvicorn.run(
        "oneplace.api.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=1,
        log_level=settings.log_level.lower(),
    )


@app.command()
def chunk(
    path: Path = typer.Argument(..., help="Policy text file"),
    size: Optional[int] = typer.Option(None, help="Window size in characters"),
    overlap: Optional[int] = typer.Option(None, help="Overlap in characters"),
) -> None:
    """Preview how a policy file will be split, without calling any API."""
    from oneplace.config import settings
    from oneplace.retrieval.chunker import chunk_text

    text = _read_policy(path)
    chunks = chunk_text(
        text,
        size if size is not None else settings.chunk_size,
        overlap if overlap is not None else settings.chunk_overlap,
    )

    table = Table(title=f"{path.name}: {len(chunks)} chunks from {len(text):,} characters")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Chars", style="green", justify="right")
    table.add_column("Preview")

    for i, c in enumerate(chunks):
        preview = c[:80].replace("\n", " ")
        table.add_row(str(i), str(len(c)), preview + ("…" if len(c) > 80 else ""))

    console.print(table)


@app.command()
def ingest(
    path: Path = typer.Argument(..., help="Policy text file"),
    version: Optional[str] = typer.Option(None, "--version", "-v", help="Version label"),
    url: str = typer.Option(DEFAULT_URL, help="Base URL of a running server"),
    timeout: float = typer.Option(300.0, help="Request timeout in seconds"),
) -> None:
    """Send a policy file to a running server, replacing its stored policy."""
    text = _read_policy(path)
    payload = {"text": text}
    if version:
        payload["version"] = version

    with console.status("[bold green]Ingesting..."):
        body = _post(f"{url.rstrip('/')}/api/ingest", payload, timeout)

    console.print(
        f"[green]✓ Ingested {body['ingestedChunks']} chunks as version {body['version']}[/green]"
    )


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question to ask"),
    url: str = typer.Option(DEFAULT_URL, help="Base URL of a running server"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show source scores"),
    timeout: float = typer.Option(60.0, help="Request timeout in seconds"),
) -> None:
    """Ask a running server a question about the stored policy."""
    console.print(f"[blue]Question:[/blue] {question}\n")

    with console.status("[bold green]Processing..."):
        body = _post(f"{url.rstrip('/')}/api/chat", {"question": question}, timeout)

    console.print("[green]Answer:[/green]")
    console.print(body.get("answer", "No answer generated."))
    console.print()

    sources = body.get("sources", [])
    if verbose and sources:
        table = Table(title="Sources")
        table.add_column("Source", style="cyan")
        table.add_column("Chunk", style="green")
        table.add_column("Score", justify="right")
        for s in sources:
            table.add_row(str(s["sourceIndex"]), s["id"], f"{s['score']:.3f}")
        console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from oneplace import __version__

    console.print(f"OnePlace assistant v{__version__}")


if __name__ == "__main__":
    app()
