"""Subtitle stream discovery.

Three strategies are tried in turn, each only when the previous one found
nothing:

1. ``ffprobe`` CSV output restricted to subtitle streams.
2. Scraping the input summary ffmpeg prints to its log.
3. Probing ``0:s:0``, ``0:s:1``, ... with zero-length ffmpeg runs.
"""

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, List, Optional, Tuple

from .toolkit import ToolkitConfig

UNKNOWN = "unknown"

# Image-based subtitle codecs; these cannot be converted to text.
IMAGE_BASED_CODECS: FrozenSet[str] = frozenset({
    "hdmv_pgs_subtitle", "pgssub", "dvd_subtitle", "dvdsub",
    "vobsub", "dvb_subtitle", "dvbsub", "xsub",
})

# ISO 639 code with an optional BCP 47 subtag: ``eng``, ``pt-BR``, ``zh-Hans``.
LANGUAGE_TAG = re.compile(r"^[A-Za-z]{2,3}(?:[-_][A-Za-z0-9]{2,8})*$")

# ``Stream #0:3(eng): Subtitle: subrip (default)`` and
# ``Stream #0:3: Subtitle: subrip``; ts/m2ts inputs add ``[0x1203]`` after the index.
STREAM_LOG_PATTERNS: Tuple["re.Pattern[str]", ...] = (
    re.compile(r"Stream #(\d+):(\d+)(?:\[0x[0-9a-fA-F]+\])?\(([^)]*)\):\s*Subtitle:\s*(.+)"),
    re.compile(r"Stream #(\d+):(\d+)(?:\[0x[0-9a-fA-F]+\])?:\s*Subtitle:\s*(.+)"),
)


@dataclass(frozen=True)
class StreamDescriptor:
    """One subtitle stream inside a container."""

    index: int
    codec_name: str = UNKNOWN
    language: str = UNKNOWN
    title: str = ""
    # Order among the container's subtitle streams, i.e. N in ``0:s:N``.
    position: int = 0

    def __post_init__(self) -> None:
        if not self.title:
            object.__setattr__(self, "title", f"Subtitle stream {self.index}")

    @property
    def has_language(self) -> bool:
        return bool(self.language) and self.language != UNKNOWN

    @property
    def is_image_based(self) -> bool:
        return self.codec_name.lower() in IMAGE_BASED_CODECS


# ------------------------------------------------------------------
# Output parsers
# ------------------------------------------------------------------

def parse_probe_csv(output: str) -> List[StreamDescriptor]:
    """Parse ``ffprobe -of csv=p=0`` lines into descriptors.

    Field order is index, codec name, codec type, codec tag, language,
    title. A fifth field that is not a language code is taken as the
    title. Lines with fewer than three fields or a non-numeric index are
    ignored.
    """
    streams: List[StreamDescriptor] = []
    for line in output.splitlines():
        raw_fields = line.strip().split(",")
        fields = [field.strip() for field in raw_fields]
        if len(fields) < 3:
            continue
        try:
            index = int(fields[0])
        except ValueError:
            logging.debug(f"Ignoring ffprobe line: {line!r}")
            continue
        language = fields[4] if len(fields) > 4 else ""
        title_start = 5
        # Absent tags are left out entirely, so a title can land in the
        # language column.
        if language and not LANGUAGE_TAG.match(language):
            language, title_start = "", 4
        # Titles may contain commas of their own.
        title = ",".join(raw_fields[title_start:]).strip()
        streams.append(StreamDescriptor(
            index=index,
            codec_name=fields[1] or UNKNOWN,
            language=language or UNKNOWN,
            title=title,
            position=len(streams),
        ))
    return streams


def parse_stream_log(log: str) -> List[StreamDescriptor]:
    """Scrape subtitle streams from ffmpeg's human-readable input summary."""
    streams: List[StreamDescriptor] = []
    for line in log.splitlines():
        for pattern in STREAM_LOG_PATTERNS:
            match = pattern.search(line)
            if match:
                description = match.groups()[-1].strip()
                codec = re.split(r"[\s,(]", description, maxsplit=1)[0]
                streams.append(StreamDescriptor(
                    index=int(match.group(2)),
                    codec_name=codec or UNKNOWN,
                    position=len(streams),
                ))
                break
    return streams


# ------------------------------------------------------------------
# Lister
# ------------------------------------------------------------------

class StreamLister:
    """Enumerates subtitle streams through ffprobe/ffmpeg."""

    def __init__(self, config: Optional[ToolkitConfig] = None) -> None:
        self.config = config or ToolkitConfig()

    def list_streams(self, video_file: Path) -> List[StreamDescriptor]:
        """Return the subtitle streams of *video_file*; empty when there are none."""
        streams = self._query_ffprobe(video_file)
        if streams:
            return streams

        logging.debug("ffprobe reported no subtitle streams, scanning ffmpeg log")
        streams = self._scan_ffmpeg_log(video_file)
        if streams:
            return streams

        logging.debug("Nothing found in ffmpeg log, probing sub-streams directly")
        return self._probe_substreams(video_file)

    def _query_ffprobe(self, video_file: Path) -> List[StreamDescriptor]:
        cmd = [
            self.config.ffprobe_path, "-v", "error",
            "-select_streams", "s",
            "-show_entries",
            "stream=index,codec_name,codec_type,codec_tag_string:stream_tags=language,title",
            "-of", "csv=p=0",
            str(video_file),
        ]
        logging.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
        except OSError as exc:
            logging.error(f"Could not run ffprobe: {exc}")
            return []
        if result.returncode != 0:
            logging.debug(f"ffprobe exited with status {result.returncode}: {result.stderr.strip()}")
        return parse_probe_csv(result.stdout)

    def _scan_ffmpeg_log(self, video_file: Path) -> List[StreamDescriptor]:
        # Without an output file ffmpeg prints the input summary and exits
        # non-zero; only the log matters here.
        cmd = [self.config.ffmpeg_path, "-hide_banner", "-i", str(video_file)]
        logging.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
        except OSError as exc:
            logging.error(f"Could not run ffmpeg: {exc}")
            return []
        return parse_stream_log(f"{result.stderr}\n{result.stdout}")

    def _probe_substreams(self, video_file: Path) -> List[StreamDescriptor]:
        streams: List[StreamDescriptor] = []
        for i in range(self.config.probe_limit):
            cmd = [
                self.config.ffmpeg_path, "-v", "error",
                "-i", str(video_file),
                "-map", f"0:s:{i}",
                "-c", "copy", "-t", "0", "-f", "null", "-",
            ]
            logging.debug(f"Running: {' '.join(cmd)}")
            try:
                result = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
            except OSError as exc:
                logging.debug(f"Probing sub-stream {i} failed: {exc}")
                break
            # Sub-stream numbering is contiguous, so the first miss ends the scan.
            if result.returncode != 0:
                break
            streams.append(StreamDescriptor(
                index=i,
                title=f"Subtitle stream {i} (auto-detected)",
                position=i,
            ))
        return streams
