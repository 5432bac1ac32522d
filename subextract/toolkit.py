"""Locating and probing the ffmpeg/ffprobe executables."""

import logging
import re
import subprocess
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Tuple

# First line of ``ffmpeg -version`` / ``ffprobe -version``.
VERSION_BANNER = re.compile(r"^(ffmpeg|ffprobe) version (\S+)")

DEFAULT_PROBE_LIMIT = 10


@dataclass(frozen=True)
class ToolkitConfig:
    """Resolved paths of the external tools, passed to every component."""

    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    # Number of sub-stream indices tried by the manual probing fallback.
    probe_limit: int = DEFAULT_PROBE_LIMIT

    def with_ffmpeg(self, ffmpeg_path: str) -> "ToolkitConfig":
        """Return a copy pointing at *ffmpeg_path* and the ffprobe next to it."""
        ffmpeg = Path(ffmpeg_path)
        ffprobe_name = ffmpeg.name.replace("ffmpeg", "ffprobe")
        if ffprobe_name == ffmpeg.name:
            ffprobe_name = "ffprobe"
        if ffmpeg.parent == Path("."):
            ffprobe = ffprobe_name
        else:
            ffprobe = str(ffmpeg.parent / ffprobe_name)
        return replace(self, ffmpeg_path=str(ffmpeg), ffprobe_path=ffprobe)


def _read_version(cmd: List[str]) -> str:
    """Return the version token from *cmd*'s banner, or "" when it does not match."""
    logging.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as exc:
        logging.debug(f"Could not launch {cmd[0]}: {exc}")
        return ""
    if result.returncode != 0:
        logging.debug(f"{cmd[0]} exited with status {result.returncode}")
        return ""
    lines = result.stdout.splitlines()
    match = VERSION_BANNER.match(lines[0]) if lines else None
    return match.group(2) if match else ""


def check_available(config: ToolkitConfig) -> Tuple[bool, str]:
    """Return ``(available, version)`` for the ffmpeg/ffprobe pair in *config*.

    Both executables must launch, exit cleanly and print the expected
    version banner. The version reported is ffmpeg's.
    """
    ffmpeg_version = _read_version([config.ffmpeg_path, "-version"])
    if not ffmpeg_version:
        return False, ""
    if not _read_version([config.ffprobe_path, "-version"]):
        return False, ""
    return True, ffmpeg_version
