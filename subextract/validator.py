"""Input file validation."""

import logging
from pathlib import Path
from typing import FrozenSet, Union

from .utils import format_size

# Container extensions accepted as input (compared lower-cased).
VIDEO_EXTENSIONS: FrozenSet[str] = frozenset({
    ".mp4", ".mkv", ".avi", ".mov", ".wmv", ".flv", ".webm",
    ".m4v", ".3gp", ".ts", ".m2ts", ".mpg", ".mpeg", ".ogv",
})


def has_video_extension(path: Union[str, Path]) -> bool:
    """Return True when *path* carries an allowed container extension."""
    return Path(path).suffix.lower() in VIDEO_EXTENSIONS


def validate(path: Union[str, Path]) -> bool:
    """Return True when *path* is an existing file with a video extension.

    Only the extension is checked, never the file content. The extension is
    checked first so a rejected name never reaches the filesystem.
    """
    path = Path(path)
    if not has_video_extension(path):
        supported = " ".join(sorted(VIDEO_EXTENSIONS))
        logging.error(f"Unsupported file type '{path.suffix or path.name}'. Supported: {supported}")
        return False
    if not path.is_file():
        logging.error(f"File not found: {path}")
        return False

    logging.info(f"File: {path.name} ({format_size(path.stat().st_size)})")
    return True
