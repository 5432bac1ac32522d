"""Console rendering of stream lists and extraction results."""

from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .extractor import StreamExtractor
from .lister import StreamDescriptor
from .workflow import extract_all

_MAX_TITLE = 40


def show_streams(
    video_file: Path,
    streams: Sequence[StreamDescriptor],
    console: Optional[Console] = None,
) -> None:
    """Print a numbered table of *streams*."""
    console = console or Console()
    console.print(f"\n[bold]Subtitle streams in {escape(Path(video_file).name)}[/bold]")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", style="cyan", width=4)
    table.add_column("Index", width=6)
    table.add_column("Codec", style="yellow", width=18)
    table.add_column("Language", style="green", width=10)
    table.add_column("Title", width=_MAX_TITLE)
    table.add_column("Kind", width=7)

    for number, stream in enumerate(streams, start=1):
        title = stream.title
        if len(title) > _MAX_TITLE:
            title = title[:_MAX_TITLE - 3] + "..."
        table.add_row(
            str(number),
            str(stream.index),
            escape(stream.codec_name),
            escape(stream.language),
            escape(title),
            "[red]image[/red]" if stream.is_image_based else "text",
        )
    console.print(table)


def make_progress(console: Optional[Console] = None) -> Progress:
    """Return the progress bar used while extracting several streams."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    )


def run_extract_all(
    extractor: StreamExtractor,
    video_file: Path,
    streams: Sequence[StreamDescriptor],
    output_dir: Path,
    console: Optional[Console] = None,
) -> int:
    """Extract every stream under a progress bar; return the success count."""
    console = console or Console()
    with make_progress(console) as progress:
        task = progress.add_task("Extracting subtitles", total=len(streams))
        success, _ = extract_all(
            extractor, video_file, streams, output_dir,
            on_done=lambda number, outcome: progress.advance(task),
        )
    show_summary(success, len(streams), output_dir, console)
    return success


def show_summary(success: int, total: int, output_dir: Path, console: Optional[Console] = None) -> None:
    """Print the ``success/total`` line after a batch extraction."""
    console = console or Console()
    style = "green" if success == total else ("yellow" if success else "red")
    console.print(f"[{style}]Extracted {success}/{total} subtitle stream(s)[/{style}] -> {escape(str(output_dir))}")
