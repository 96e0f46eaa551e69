#!/usr/bin/env python
"""
CLI interface for EPUB Narrator.

Provides command-line tools for extracting, converting and chunking EPUB
content for speech synthesis.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich import box

from epub_narrator.chunker import split_text
from epub_narrator.extractor import extract_fragments
from epub_narrator.markup import xhtml_to_text
from epub_narrator.pipeline import run_pipeline
from epub_narrator.utils.config_loader import load_config
from epub_narrator.utils.logger import setup_logging, get_logger
from epub_narrator.utils.validation import ConfigError

# Create Typer app
app = typer.Typer(
    name="narrator",
    help="EPUB Narrator - XHTML to speech-ready text chunks",
    add_completion=False
)

console = Console()
logger = get_logger(__name__)


def get_config(config_path: Optional[str], verbose: bool) -> Dict[str, Any]:
    """Load configuration and set up logging from it.

    Exits with status 1 on configuration errors.
    """
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        sys.exit(1)

    level = "DEBUG" if verbose else cfg["logging"]["level"]
    setup_logging(level=level, log_file=cfg["logging"].get("file"))
    return cfg


@app.command()
def extract(
    epub: Path = typer.Argument(..., exists=True, dir_okay=False, help="EPUB file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Extract XHTML fragments from an EPUB in reading order."""
    cfg = get_config(config, verbose)
    output_dir = output or Path(cfg["paths"]["work_dir"]) / epub.stem

    fragments = extract_fragments(
        epub,
        output_dir,
        allowed_extensions=cfg["extract"]["allowed_extensions"],
        fragment_dir=cfg["extract"]["fragment_dir"],
    )

    for i, path in enumerate(fragments, start=1):
        console.print(f"{i:3d}  {path}")
    console.print(f"[green]Extracted {len(fragments)} fragments[/green]")


@app.command()
def text(
    fragment: Path = typer.Argument(..., exists=True, dir_okay=False, help="XHTML file"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Print the narration text of one XHTML fragment."""
    get_config(config, verbose)
    console.print(xhtml_to_text(fragment.read_text(encoding="utf-8")), markup=False, highlight=False)


@app.command()
def split(
    fragment: Path = typer.Argument(..., exists=True, dir_okay=False, help="XHTML file"),
    max_chars: Optional[int] = typer.Option(None, "--max-chars", "-m", help="Maximum characters per chunk"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Show the chunks of one XHTML fragment."""
    cfg = get_config(config, verbose)
    limit = cfg["narrator"]["max_chars"] if max_chars is None else max_chars

    try:
        chunks = split_text(xhtml_to_text(fragment.read_text(encoding="utf-8")), limit)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    table = Table(title=f"{fragment.name} (max {limit} chars)", box=box.ROUNDED)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Chars", justify="right")
    table.add_column("Text")
    for i, chunk in enumerate(chunks, start=1):
        table.add_row(str(i), str(len(chunk)), repr(chunk))
    console.print(table)


@app.command()
def run(
    source: Path = typer.Argument(..., exists=True, help="EPUB file or directory of XHTML fragments"),
    max_chars: Optional[int] = typer.Option(None, "--max-chars", "-m", help="Maximum characters per chunk"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Worker threads"),
    no_jobs: bool = typer.Option(False, "--no-jobs", help="Skip speech job creation"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Run the full pipeline: extract, convert, chunk and create speech jobs."""
    cfg = get_config(config, verbose)

    try:
        summary = run_pipeline(source, cfg, create_jobs=not no_jobs,
                               max_chars=max_chars, workers=workers)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    table = Table(title=f"Book: {summary['book_id']}", box=box.ROUNDED)
    table.add_column("Fragments", justify="right")
    table.add_column("Chunks", justify="right")
    table.add_column("Jobs", justify="right")
    table.add_column("Output")
    table.add_row(
        str(summary["total_fragments"]),
        str(summary["total_chunks"]),
        str(summary["jobs_created"]),
        summary["output_dir"],
    )
    console.print(table)


if __name__ == "__main__":
    app()
