"""Core subtitle extraction logic."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .lister import StreamDescriptor
from .toolkit import ToolkitConfig

# Builds the stream-specific part of an ffmpeg command line:
# (descriptor) -> arguments between the input and the output path.
ArgumentBuilder = Callable[[StreamDescriptor], List[str]]


@dataclass(frozen=True)
class ExtractionVariant:
    """One way of asking ffmpeg for a text subtitle."""

    name: str
    build: ArgumentBuilder


@dataclass(frozen=True)
class ExtractionOutcome:
    """Result of extracting one stream."""

    success: bool
    output_path: Path
    size: int = 0
    variant: Optional[str] = None


def _relative_to_srt(stream: StreamDescriptor) -> List[str]:
    return ["-map", f"0:s:{stream.position}", "-c:s", "srt", "-avoid_negative_ts", "make_zero"]


def _absolute_to_srt(stream: StreamDescriptor) -> List[str]:
    return ["-map", f"0:{stream.index}", "-c:s", "srt", "-avoid_negative_ts", "make_zero"]


def _relative_srt_container(stream: StreamDescriptor) -> List[str]:
    # Lets ffmpeg pick the conversion; handles ASS/SSA styling cleanly.
    return ["-map", f"0:s:{stream.position}", "-f", "srt"]


def _absolute_copy(stream: StreamDescriptor) -> List[str]:
    # Only works when the source is already text.
    return ["-map", f"0:{stream.index}", "-c", "copy"]


# Tried in order until one produces a non-empty file.
EXTRACTION_VARIANTS: Tuple[ExtractionVariant, ...] = (
    ExtractionVariant("relative index, convert to srt", _relative_to_srt),
    ExtractionVariant("absolute index, convert to srt", _absolute_to_srt),
    ExtractionVariant("relative index, srt container", _relative_srt_container),
    ExtractionVariant("absolute index, stream copy", _absolute_copy),
)


def build_output_name(video_file: Path, stream: StreamDescriptor, display_number: int) -> str:
    """Return ``{stem}_subtitle_{n}[_{language}].srt`` for *stream*."""
    suffix = f"_{stream.language}" if stream.has_language else ""
    return f"{video_file.stem}_subtitle_{display_number}{suffix}.srt"


class StreamExtractor:
    """Extracts single subtitle streams to SRT via ffmpeg."""

    def __init__(
        self,
        config: Optional[ToolkitConfig] = None,
        variants: Tuple[ExtractionVariant, ...] = EXTRACTION_VARIANTS,
    ) -> None:
        self.config = config or ToolkitConfig()
        self.variants = variants

    def extract(
        self,
        video_file: Path,
        stream: StreamDescriptor,
        output_dir: Path,
        display_number: int,
    ) -> ExtractionOutcome:
        """Extract *stream* into *output_dir*, trying each variant in turn.

        A variant succeeds only when ffmpeg exits 0 *and* leaves a non-empty
        file behind. Image-based streams (PGS, VobSub) are expected to fail
        every variant.
        """
        output_file = Path(output_dir) / build_output_name(video_file, stream, display_number)

        for variant in self.variants:
            cmd = [self.config.ffmpeg_path, "-y", "-v", "error", "-i", str(video_file)]
            cmd += variant.build(stream)
            cmd.append(str(output_file))

            logging.debug(f"  Trying {variant.name}: {' '.join(cmd)}")
            try:
                result = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
            except OSError as exc:
                logging.error(f"  Could not run ffmpeg: {exc}")
                break

            size = output_file.stat().st_size if output_file.exists() else 0
            if result.returncode == 0 and size > 0:
                return ExtractionOutcome(True, output_file, size, variant.name)

            logging.debug(
                f"  {variant.name} failed (exit {result.returncode}, {size} bytes): "
                f"{result.stderr.strip()}"
            )
            self._discard(output_file)

        if stream.is_image_based:
            logging.warning(
                f"  Stream {stream.index} uses image-based codec '{stream.codec_name}' "
                "and cannot be converted to text"
            )
        return ExtractionOutcome(False, output_file)

    @staticmethod
    def _discard(output_file: Path) -> None:
        """Remove a partial or empty artifact left by a failed attempt."""
        try:
            output_file.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logging.debug(f"  Could not remove {output_file}: {exc}")
