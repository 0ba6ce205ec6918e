import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from post_analyzer import __version__
from post_analyzer.config import AnalyzerConfig
from post_analyzer.logger import setup_logging
from post_analyzer.models import SubmittedFile
from post_analyzer.session import Session, SessionState

app = typer.Typer(add_completion=False, help="post-analyzer – extract text from a PDF or image and get posting tips")
console = Console()


@app.command()
def analyze(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="PDF or image file"),
    media_type: Optional[str] = typer.Option(None, "--media-type", help="Declared media type (guessed from extension by default)"),
    show_text: bool = typer.Option(False, "--show-text", help="Print the extracted text"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override POST_ANALYZER_LOG_LEVEL"),
):
    """Extract text from a document and list suggestions for social media."""
    config = AnalyzerConfig.from_env()
    setup_logging(log_level or config.log_level)

    file = SubmittedFile.from_path(path, media_type=media_type)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Processing {file.name}", total=100)

        def on_change(state: SessionState) -> None:
            if state.loading:
                progress.update(task, completed=state.progress)

        session = Session(config=config, on_change=on_change)
        state = asyncio.run(session.submit(file))

    if state.error:
        console.print(f"[red]✘ {state.error}[/red]")
        raise typer.Exit(code=1)

    if show_text:
        console.print(Panel(state.text.strip() or "(empty)", title=f"Extracted text – {state.file_name}"))

    console.print(f"[bold]Suggestions for {state.file_name}[/bold]")
    for suggestion in state.suggestions:
        console.print(f"  • {suggestion}")


@app.command()
def version():
    """Print the package version."""
    console.print(__version__)


def main():
    app()
