"""Steps shared by the batch driver and the interactive session.

Each gating step raises a :class:`SubExtractError` subclass; the two
front ends catch it and report the message.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from . import validator
from .extractor import ExtractionOutcome, StreamExtractor
from .lister import StreamDescriptor, StreamLister
from .toolkit import ToolkitConfig, check_available
from .utils import format_size


class SubExtractError(Exception):
    """Base class for conditions reported to the user."""


class ToolkitUnavailable(SubExtractError):
    """ffmpeg/ffprobe could not be launched or identified."""


class InvalidInput(SubExtractError):
    """Input file is missing or not a supported container."""


class NoStreamsFound(SubExtractError):
    """The container has no subtitle streams."""


class ExtractionFailed(SubExtractError):
    """Every extraction variant failed for a stream."""


class InvalidSelection(SubExtractError):
    """Stream number or menu choice out of range."""


class DirectoryCreateFailed(SubExtractError):
    """Output directory could not be created."""


def require_toolkit(config: ToolkitConfig) -> str:
    """Return the ffmpeg version, or raise :class:`ToolkitUnavailable`."""
    available, version = check_available(config)
    if not available:
        raise ToolkitUnavailable(
            f"ffmpeg/ffprobe not usable (ffmpeg: {config.ffmpeg_path}, "
            f"ffprobe: {config.ffprobe_path})"
        )
    logging.debug(f"Using ffmpeg {version}")
    return version


def load_streams(lister: StreamLister, video_file: Path) -> List[StreamDescriptor]:
    """Validate *video_file* and return its subtitle streams (never empty)."""
    if not validator.validate(video_file):
        raise InvalidInput(f"Not a usable video file: {video_file}")
    logging.info("Scanning for subtitle streams...")
    streams = lister.list_streams(video_file)
    if not streams:
        raise NoStreamsFound(f"No subtitle streams found in {Path(video_file).name}")
    return streams


def pick_stream(streams: Sequence[StreamDescriptor], number: int) -> StreamDescriptor:
    """Return the stream with 1-based *number*; out-of-range numbers are rejected."""
    if not 1 <= number <= len(streams):
        raise InvalidSelection(
            f"Stream number {number} is out of range (choose 1-{len(streams)})"
        )
    return streams[number - 1]


def ensure_output_dir(output_dir: Path) -> Path:
    """Create *output_dir* (with parents) if needed and return it."""
    output_dir = Path(output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreateFailed(f"Cannot create output directory {output_dir}: {exc}")
    return output_dir


def _run_extraction(
    extractor: StreamExtractor,
    video_file: Path,
    stream: StreamDescriptor,
    output_dir: Path,
    display_number: int,
) -> ExtractionOutcome:
    logging.info(f"Extracting stream {display_number}: {stream.title}")
    outcome = extractor.extract(video_file, stream, output_dir, display_number)
    if outcome.success:
        logging.info(f"  Extracted: {outcome.output_path.name} ({format_size(outcome.size)})")
    return outcome


def extract_one(
    extractor: StreamExtractor,
    video_file: Path,
    stream: StreamDescriptor,
    output_dir: Path,
    display_number: int,
) -> ExtractionOutcome:
    """Extract a single stream; raise :class:`ExtractionFailed` when nothing worked."""
    outcome = _run_extraction(extractor, video_file, stream, output_dir, display_number)
    if not outcome.success:
        raise ExtractionFailed(
            f"Could not extract stream {display_number} ({stream.codec_name})"
        )
    return outcome


def extract_all(
    extractor: StreamExtractor,
    video_file: Path,
    streams: Sequence[StreamDescriptor],
    output_dir: Path,
    on_done: Optional[Callable[[int, ExtractionOutcome], None]] = None,
) -> Tuple[int, List[ExtractionOutcome]]:
    """Extract every stream in order; failures are tallied, never fatal.

    Returns ``(successful_count, outcomes)``. *on_done* is called after each
    stream with its display number and outcome.
    """
    outcomes: List[ExtractionOutcome] = []
    for number, stream in enumerate(streams, start=1):
        outcome = _run_extraction(extractor, video_file, stream, output_dir, number)
        if not outcome.success:
            logging.error(f"  Could not extract stream {number} ({stream.codec_name})")
        outcomes.append(outcome)
        if on_done is not None:
            on_done(number, outcome)
    return sum(1 for o in outcomes if o.success), outcomes
