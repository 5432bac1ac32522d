"""Command-line interface for subextract."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import load_config, toolkit_from
from .display import run_extract_all, show_streams
from .extractor import StreamExtractor
from .lister import StreamLister
from .session import InteractiveSession
from .utils import positive_int
from .workflow import (
    ExtractionFailed,
    SubExtractError,
    ensure_output_dir,
    extract_one,
    load_streams,
    pick_stream,
    require_toolkit,
)


# ------------------------------------------------------------------
# Logging setup (single, authoritative call)
# ------------------------------------------------------------------

def setup_logging(verbosity: int = 0, log_file: Optional[Path] = None) -> None:
    """Configure the root logger.

    Args:
        verbosity: -1 = WARNING only, 0 = INFO (default), 1 = DEBUG.
        log_file:  Optional path; when given, output goes to both file and stderr.
    """
    level = {-1: logging.WARNING, 0: logging.INFO, 1: logging.DEBUG}.get(
        verbosity, logging.INFO
    )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    fmt = "%(asctime)s - %(levelname)s - %(message)s" if log_file else "%(message)s"
    formatter = logging.Formatter(fmt)

    if log_file:
        fh = logging.FileHandler(log_file)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setFormatter(formatter)
    root.addHandler(ch)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subextract",
        description="Extract embedded subtitle streams from video files as SRT",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                              # interactive menu
  %(prog)s movie.mkv --list
  %(prog)s movie.mkv --all --output-dir subs
  %(prog)s movie.mkv --stream 2
  %(prog)s movie.mkv --ffmpeg /opt/ffmpeg/bin/ffmpeg --ffprobe /opt/ffmpeg/bin/ffprobe

Config file: create ~/.subextract.yaml with default settings.
        """,
    )

    parser.add_argument("input", type=Path, nargs="?",
                        help="Video file to inspect (omit for the interactive menu)")
    parser.add_argument("-o", "--output-dir", type=Path,
                        help="Write subtitles to this directory (default: next to the video)")

    # ---- mode ----
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-l", "--list", action="store_true",
                      help="Only list the subtitle streams")
    mode.add_argument("-a", "--all", action="store_true",
                      help="Extract every subtitle stream")
    mode.add_argument("-s", "--stream", type=int, metavar="N",
                      help="Extract stream number N (1-based, as listed)")
    mode.add_argument("-i", "--interactive", action="store_true",
                      help="Use the interactive menu")

    # ---- tools ----
    parser.add_argument("--ffmpeg", metavar="PATH", help="Path to the ffmpeg executable")
    parser.add_argument("--ffprobe", metavar="PATH", help="Path to the ffprobe executable")
    parser.add_argument("--probe-limit", type=positive_int, metavar="N",
                        help="Sub-streams tried when ffprobe and the ffmpeg log find nothing (default: 10)")

    # ---- output / reporting ----
    parser.add_argument("--log-file", type=Path,
                        help="Save log output to a file (in addition to stderr)")
    verbosity_group = parser.add_mutually_exclusive_group()
    verbosity_group.add_argument("-v", "--verbose", action="store_true",
                                 help="Enable debug-level output")
    verbosity_group.add_argument("-q", "--quiet", action="store_true",
                                 help="Suppress informational messages (warnings and errors only)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------

def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    """Parse arguments and run the requested mode; return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    verbosity = 1 if args.verbose else (-1 if args.quiet else 0)
    setup_logging(verbosity=verbosity, log_file=args.log_file)

    config = load_config()
    toolkit = toolkit_from(config, args.ffmpeg, args.ffprobe, args.probe_limit)
    output_dir = args.output_dir or (
        Path(config["output_dir"]).expanduser() if "output_dir" in config else None
    )
    console = console or Console()

    # ------------------------------------------------------------------
    # Interactive mode (also the default without arguments)
    # ------------------------------------------------------------------
    if args.input is None or args.interactive:
        session = InteractiveSession(toolkit, console=console, output_dir=output_dir)
        return session.run(args.input)

    # ------------------------------------------------------------------
    # Batch mode
    # ------------------------------------------------------------------
    try:
        version = require_toolkit(toolkit)
    except SubExtractError as exc:
        logging.error(f"Error: {exc}")
        logging.error("Install ffmpeg or pass --ffmpeg/--ffprobe with the executable paths.")
        return 1
    logging.debug(f"ffmpeg {version}")

    video_file: Path = args.input
    try:
        streams = load_streams(StreamLister(toolkit), video_file)
    except SubExtractError as exc:
        logging.error(f"Error: {exc}")
        return 1

    show_streams(video_file, streams, console)

    if args.list:
        return 0

    if not (args.all or args.stream is not None):
        session = InteractiveSession(toolkit, console=console, output_dir=output_dir)
        return session.run(video_file, streams, check_toolkit=False)

    extractor = StreamExtractor(toolkit)
    try:
        selected = pick_stream(streams, args.stream) if args.stream is not None else None
        target_dir = ensure_output_dir(output_dir or video_file.resolve().parent)

        if selected is None:
            # Failures are tallied in the summary; they do not change the status.
            run_extract_all(extractor, video_file, streams, target_dir, console)
            return 0

        outcome = extract_one(extractor, video_file, selected, target_dir, args.stream)
    except ExtractionFailed as exc:
        logging.error(f"Error: {exc}")
        return 0
    except SubExtractError as exc:
        logging.error(f"Error: {exc}")
        return 1

    console.print(f"Saved {escape(str(outcome.output_path))}")
    return 0


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())
